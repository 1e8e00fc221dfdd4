"""
Referral engine.

Every account may generate one referral code and may claim one inviter's code.
Codes are unique across accounts and never change once assigned. A claim is
two single-row writes on different accounts, marking the claimer and then
bumping the inviter's counter. They are not wrapped in a transaction; if the
second write is lost the counter lags behind the claim ledger until the
reconciliation job repairs it.
"""

import logging
import secrets
from urllib import parse

from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct

from pool_backend.domain.profile import normalize_wallet_address
from pool_backend.errors import (
    Conflict,
    InvalidOperation,
    NotFound,
    ReferralCodeTaken,
    Unauthorized,
)

log = logging.getLogger("referrals")

SIGNATURE_MESSAGE_TEMPLATE = "ZeroGPool Referral Verification\nWallet: {wallet}\nNonce: {nonce}"
MISSING_NONCE = "MISSING_NONCE"


def new_referral_code() -> str:
    return secrets.token_hex(4).upper()


def normalize_referral_code(code: str) -> str:
    return code.strip().upper()


def build_signature_message(wallet_address: str, nonce=None) -> str:
    # The wallet is embedded exactly as the client sent it, since that is what it signed
    return SIGNATURE_MESSAGE_TEMPLATE.format(wallet=wallet_address, nonce=nonce or MISSING_NONCE)


def verify_wallet_signature(wallet_address: str, signature: str, nonce=None) -> None:
    message = build_signature_message(wallet_address, nonce)
    try:
        recovered = EthAccount.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        log.warning(f"Could not recover signer for {wallet_address}: {e}")
        raise Unauthorized("Invalid signature") from e

    if recovered.lower() != normalize_wallet_address(wallet_address):
        log.warning(f"Signature for {wallet_address} was made by {recovered}")
        raise Unauthorized("Signature does not match wallet")


class GeneratedCode:
    def __init__(self, code: str, link: str):
        self.code = code
        self.link = link


class ClaimResult:
    def __init__(self, count: int, already_claimed: bool = False):
        self.count = count
        self.already_claimed = already_claimed

    @property
    def message(self) -> str:
        return "already claimed" if self.already_claimed else "Referral claimed successfully"


class ReferralEngine:
    def __init__(self, repository, base_url: str, max_attempts: int = 5, code_factory=new_referral_code):
        self._repository = repository
        self._base_url = base_url
        self._max_attempts = max_attempts
        self._code_factory = code_factory

    def referral_link(self, code: str) -> str:
        return f"{self._base_url}?{parse.urlencode({'ref': code})}"

    def generate_code(self, wallet_address: str, signature: str, nonce=None) -> GeneratedCode:
        verify_wallet_signature(wallet_address, signature, nonce)

        account = self._repository.get_or_create(wallet_address)
        if account.referral.code:
            return GeneratedCode(account.referral.code, self.referral_link(account.referral.code))

        for attempt in range(1, self._max_attempts + 1):
            code = self._code_factory()
            while self._repository.find_by_referral_code(code) is not None:
                code = self._code_factory()

            try:
                assigned = self._repository.assign_referral_code(account.wallet_address, code)
            except ReferralCodeTaken:
                log.warning(
                    f"Referral code {code} was taken concurrently (attempt {attempt}/{self._max_attempts})"
                )
                continue

            if not assigned:
                # A concurrent request for the same wallet won; hand back its code
                code = self._repository.find(account.wallet_address).referral.code
            else:
                log.info(f"Referral code {code} generated for {account.wallet_address}")
            return GeneratedCode(code, self.referral_link(code))

        log.error(f"Gave up generating a referral code for {account.wallet_address}")
        raise Conflict("Could not allocate a unique referral code, please retry")

    def claim_code(self, wallet_address: str, code: str) -> ClaimResult:
        wallet_address = normalize_wallet_address(wallet_address)
        code = normalize_referral_code(code)

        inviter = self._repository.find_by_referral_code(code)
        if inviter is None:
            raise NotFound("Invalid referral code")

        if inviter.wallet_address == wallet_address:
            raise InvalidOperation("You cannot use your own referral code")

        claimer = self._repository.get_or_create(wallet_address)
        if claimer.referral.referred_by is not None:
            return ClaimResult(inviter.referral.count, already_claimed=True)

        if not self._repository.mark_referred_by(wallet_address, code):
            # Lost a race against another claim from the same wallet
            current = self._repository.find_by_referral_code(code)
            return ClaimResult(current.referral.count, already_claimed=True)

        try:
            count = self._repository.increment_referral_count(code)
        except Exception:
            log.exception(
                f"{wallet_address} is marked as referred by {code} but the inviter count "
                "was not incremented; leaving it for reconciliation"
            )
            count = self._repository.count_referred_by(code)
        log.info(f"{wallet_address} claimed referral code {code}; inviter count is now {count}")
        return ClaimResult(count)

    def referral_stats(self, wallet_address: str):
        account = self._repository.find(wallet_address)
        if account is None:
            raise NotFound("User not found")
        return account.referral
