import pytest

from pool_backend.domain.referrals import ReferralEngine


@pytest.fixture
def generate(test_client, signed_request):
    def _generate(wallet, nonce="nonce-1"):
        return test_client.post("/api/referral/generate", json=signed_request(wallet, nonce))

    return _generate


@pytest.fixture
def claim(test_client):
    def _claim(wallet_address, code):
        return test_client.post(
            "/api/referral/claim", json={"walletAddress": wallet_address, "referralCode": code}
        )

    return _claim


def test_generate_and_claim_flow(app, account_repository, generate, claim, wallet, other_wallet):
    app.extensions["referral_engine"] = ReferralEngine(
        account_repository, "https://zerogpool.xyz/", code_factory=lambda: "AB12CD34"
    )

    response = generate(wallet)
    assert response.status_code == 200
    assert response.get_json() == {
        "success": True,
        "referralCode": "AB12CD34",
        "referralLink": "https://zerogpool.xyz/?ref=AB12CD34",
    }

    response = claim(other_wallet.address, "AB12CD34")
    assert response.status_code == 200
    assert response.get_json() == {
        "success": True,
        "message": "Referral claimed successfully",
        "referralCount": 1,
    }

    response = claim(other_wallet.address, "AB12CD34")
    assert response.status_code == 200
    assert response.get_json()["message"] == "already claimed"
    assert response.get_json()["referralCount"] == 1


def test_generate_twice_returns_same_code(generate, wallet):
    first = generate(wallet, "nonce-1").get_json()["referralCode"]
    second = generate(wallet, "nonce-2").get_json()["referralCode"]
    assert first == second
    assert len(first) == 8


def test_generate_with_signature_from_other_wallet(test_client, signed_request, wallet, other_wallet):
    body = signed_request(other_wallet)
    body["walletAddress"] = wallet.address

    response = test_client.post("/api/referral/generate", json=body)

    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Signature does not match wallet"}


def test_generate_missing_signature(test_client, wallet):
    response = test_client.post("/api/referral/generate", json={"walletAddress": wallet.address})
    assert response.status_code == 400
    assert response.get_json()["success"] is False
    assert "signature" in response.get_json()["error"]


def test_generate_invalid_wallet(test_client):
    response = test_client.post(
        "/api/referral/generate", json={"walletAddress": "0x123", "signature": "0xabc"}
    )
    assert response.status_code == 400
    assert "Invalid wallet address format" in response.get_json()["error"]


def test_claim_counts_each_wallet(generate, claim, wallet):
    code = generate(wallet).get_json()["referralCode"]

    for n in range(1, 6):
        response = claim(f"0x{n:040x}", code)
        assert response.get_json()["referralCount"] == n


def test_claim_own_code(generate, claim, wallet):
    code = generate(wallet).get_json()["referralCode"]

    response = claim(wallet.address, code)

    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": "You cannot use your own referral code"}


def test_claim_unknown_code(claim, wallet):
    response = claim(wallet.address, "ZZZZ0000")
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Invalid referral code"}


def test_claim_missing_code(test_client, wallet):
    response = test_client.post("/api/referral/claim", json={"walletAddress": wallet.address})
    assert response.status_code == 400


def test_claim_without_body(test_client):
    response = test_client.post("/api/referral/claim")
    assert response.status_code == 400


def test_stats_requires_token(test_client):
    response = test_client.get("/api/referral/stats")
    assert response.status_code == 401
    assert response.get_json()["error"] == "No token provided. Please login first."


def test_stats_rejects_bad_token(test_client):
    response = test_client.get("/api/referral/stats", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid token. Please login again."


def test_stats(test_client, generate, claim, login, wallet, other_wallet):
    code = generate(wallet).get_json()["referralCode"]
    claim(other_wallet.address, code)
    token = login(wallet.address)

    response = test_client.get("/api/referral/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json() == {
        "success": True,
        "referralCode": code,
        "referralCount": 1,
        "referredBy": None,
    }
