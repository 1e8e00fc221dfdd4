import logging
from typing import Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pool_backend.domain.accounts import Account, ReferralState
from pool_backend.domain.profile import normalize_wallet_address
from pool_backend.errors import ReferralCodeTaken
from pool_backend.models.account import AccountModel

log = logging.getLogger("account_repository")


class SqlAlchemyAccountRepository:
    def __init__(self, db: SQLAlchemy) -> None:
        self._session = db.session

    def _to_model(self, account: Account) -> AccountModel:
        return AccountModel(
            wallet_address=account.wallet_address,
            referral_code=account.referral.code,
            referral_count=account.referral.count,
            referred_by=account.referral.referred_by,
            player_data=account.player_data,
            control_settings=account.control_settings,
            game_settings=account.game_settings,
            stats=account.stats,
            misc=account.misc,
            total_balls_pocketed=account.stats.get("total_balls_pocketed", 0),
        )

    def _to_domain(self, model: AccountModel) -> Account:
        return Account(
            model.wallet_address,
            player_data=dict(model.player_data or {}),
            control_settings=dict(model.control_settings or {}),
            game_settings=dict(model.game_settings or {}),
            stats=dict(model.stats or {}),
            misc=dict(model.misc or {}),
            referral=ReferralState(
                code=model.referral_code,
                count=model.referral_count or 0,
                referred_by=model.referred_by,
            ),
            id=model.id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _query_wallet(self, wallet_address: str):
        return self._session.query(AccountModel).filter_by(
            wallet_address=normalize_wallet_address(wallet_address)
        )

    def find(self, wallet_address: str) -> Optional[Account]:
        result = self._query_wallet(wallet_address).one_or_none()
        return self._to_domain(result) if result is not None else None

    def find_by_referral_code(self, code: str) -> Optional[Account]:
        result = self._session.query(AccountModel).filter_by(referral_code=code).one_or_none()
        return self._to_domain(result) if result is not None else None

    def get_or_create(self, wallet_address: str) -> Account:
        existing = self.find(wallet_address)
        if existing is not None:
            return existing

        account = Account(wallet_address)
        try:
            self._session.add(self._to_model(account))
            self._session.commit()
            log.info(f"New account created: {account.wallet_address}")
        except IntegrityError:
            # Another request created the same wallet first
            self._session.rollback()
        return self.find(wallet_address)

    def save(self, account: Account) -> Account:
        existing = self._query_wallet(account.wallet_address).one_or_none()
        if existing:
            existing.player_data = account.player_data
            existing.control_settings = account.control_settings
            existing.game_settings = account.game_settings
            existing.stats = account.stats
            existing.misc = account.misc
            existing.total_balls_pocketed = account.stats.get("total_balls_pocketed", 0)
            # Referral fields are only written through the dedicated methods below
        else:
            self._session.add(self._to_model(account))
        self._session.commit()
        return self.find(account.wallet_address)

    def update_profile(self, wallet_address: str, changes: dict[str, dict]) -> Account:
        account = self.get_or_create(wallet_address)
        account.apply_changes(changes)
        return self.save(account)

    def set_player_name(self, wallet_address: str, name: str) -> Optional[Account]:
        account = self.find(wallet_address)
        if account is None:
            return None
        account.apply_changes({"player_data": {"player_names0": name}})
        return self.save(account)

    def assign_referral_code(self, wallet_address: str, code: str) -> bool:
        """
        Set the account's referral code if it has none yet.
        Returns False when the account already holds a code.
        Raises ReferralCodeTaken when another account holds this code.
        """
        try:
            updated = (
                self._query_wallet(wallet_address)
                .filter(AccountModel.referral_code.is_(None))
                .update({AccountModel.referral_code: code}, synchronize_session=False)
            )
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ReferralCodeTaken(code) from e
        return updated == 1

    def mark_referred_by(self, wallet_address: str, code: str) -> bool:
        """Record the inviter code unless the account already has one."""
        updated = (
            self._query_wallet(wallet_address)
            .filter(AccountModel.referred_by.is_(None))
            .update({AccountModel.referred_by: code}, synchronize_session=False)
        )
        self._session.commit()
        return updated == 1

    def increment_referral_count(self, code: str) -> Optional[int]:
        query = self._session.query(AccountModel).filter_by(referral_code=code)
        try:
            query.update(
                {AccountModel.referral_count: AccountModel.referral_count + 1},
                synchronize_session=False,
            )
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        self._session.expire_all()
        result = query.one_or_none()
        return result.referral_count if result is not None else None

    def count_referred_by(self, code: str) -> int:
        return self._session.query(AccountModel).filter_by(referred_by=code).count()

    def set_referral_count(self, wallet_address: str, count: int) -> None:
        self._query_wallet(wallet_address).update(
            {AccountModel.referral_count: count}, synchronize_session=False
        )
        self._session.commit()

    def get_referrers(self) -> list[Account]:
        results: list[AccountModel] = (
            self._session.query(AccountModel)
            .filter(AccountModel.referral_code.isnot(None))
            .all()
        )
        return list(map(self._to_domain, results))

    def top_by_balls_pocketed(self, limit: int) -> list[Account]:
        results: list[AccountModel] = (
            self._session.query(AccountModel)
            .order_by(AccountModel.total_balls_pocketed.desc(), AccountModel.id)
            .limit(limit)
            .all()
        )
        return list(map(self._to_domain, results))
