import pytest
from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct

from pool_backend import create_app
from pool_backend.domain.referrals import ReferralEngine, build_signature_message
from pool_backend.extensions import db as _db
from pool_backend.models.account_repository import SqlAlchemyAccountRepository

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "SECRET_KEY": "testing",
    "JWT_SECRET": "testing",
    "RATELIMIT_ENABLED": False,
    "REFERRAL_BASE_URL": "https://zerogpool.xyz/",
    "BLOCKCHAIN_RPC_URL": None,
    "OPERATOR_PRIVATE_KEY": None,
    "CONTRACT_ADDRESS": None,
}


@pytest.fixture(scope="function")
def app():
    flask_app = create_app(TEST_CONFIG)
    with flask_app.app_context():
        yield flask_app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def test_client(app):
    with app.test_client() as testing_client:
        yield testing_client


@pytest.fixture
def account_repository(app):
    return SqlAlchemyAccountRepository(_db)


@pytest.fixture
def referral_engine(account_repository):
    return ReferralEngine(account_repository, "https://zerogpool.xyz/")


@pytest.fixture
def wallet():
    return EthAccount.create()


@pytest.fixture
def other_wallet():
    return EthAccount.create()


def sign_referral_request(wallet, nonce="nonce-1") -> dict:
    message = build_signature_message(wallet.address, nonce)
    signed = wallet.sign_message(encode_defunct(text=message))
    return {
        "walletAddress": wallet.address,
        "signature": "0x" + bytes(signed.signature).hex(),
        "nonce": nonce,
    }


@pytest.fixture
def signed_request():
    return sign_referral_request


@pytest.fixture
def login(test_client):
    def _login(wallet_address, ref=None):
        url = "/api/auth/login" if ref is None else f"/api/auth/login?ref={ref}"
        response = test_client.post(url, json={"walletAddress": wallet_address})
        assert response.status_code == 200
        return response.get_json()["data"]["token"]

    return _login


@pytest.fixture
def seed_players(account_repository):
    def _seed(*players):
        for wallet_address, name, balls, won_cpu, won_human in players:
            account_repository.update_profile(
                wallet_address,
                {
                    "player_data": {"player_names0": name},
                    "stats": {
                        "total_balls_pocketed": balls,
                        "total_games_won_vs_cpu": won_cpu,
                        "total_games_won_vs_human": won_human,
                    },
                },
            )

    return _seed
