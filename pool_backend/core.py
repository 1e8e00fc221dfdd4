"""
Referral count reconciliation.

A claim writes the claimer and the inviter separately, so an inviter's stored
count can fall behind (a lost increment) or drift under concurrent claims.
This job walks every account holding a referral code, recounts the accounts
referred by it, and writes the true figure back where they differ.
"""

import logging

from pool_backend.extensions import db, scheduler
from pool_backend.models.account_repository import SqlAlchemyAccountRepository

log = logging.getLogger("core")
account_repository = SqlAlchemyAccountRepository(db)


def reconcile_referral_counts() -> int:
    with scheduler.app.app_context():
        log.info("Reconciling referral counts")
        referrers = account_repository.get_referrers()
        repaired = 0
        for account in referrers:
            actual = account_repository.count_referred_by(account.referral.code)
            if actual != account.referral.count:
                log.warning(
                    f"Referral count drift for {account.wallet_address} ({account.referral.code}): "
                    f"stored {account.referral.count}, ledger {actual}; repairing"
                )
                account_repository.set_referral_count(account.wallet_address, actual)
                repaired += 1
        log.info(f"Checked {len(referrers)} referrer(s), repaired {repaired}")
        return repaired
