from pool_backend.domain.profile import (
    PROFILE_GROUPS,
    default_group,
    group_to_wire,
    normalize_wallet_address,
)


class ReferralState:
    def __init__(self, code=None, count: int = 0, referred_by=None):
        self.code = code
        self.count = count
        self.referred_by = referred_by

    def to_dict(self) -> dict:
        return {
            "referralCode": self.code,
            "referralCount": self.count,
            "referredBy": self.referred_by,
        }


class Account:
    def __init__(
        self,
        wallet_address,
        player_data=None,
        control_settings=None,
        game_settings=None,
        stats=None,
        misc=None,
        referral: ReferralState = None,
        id=None,
        created_at=None,
        updated_at=None,
    ):
        self.wallet_address = normalize_wallet_address(wallet_address)
        self.player_data = player_data if player_data is not None else default_group("player_data")
        self.control_settings = (
            control_settings if control_settings is not None else default_group("control_settings")
        )
        self.game_settings = (
            game_settings if game_settings is not None else default_group("game_settings")
        )
        self.stats = stats if stats is not None else default_group("stats")
        self.misc = misc if misc is not None else default_group("misc")
        self.referral = referral if referral is not None else ReferralState()
        self.id = id
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def display_name(self) -> str:
        return self.player_data.get("player_names0") or "Anonymous"

    @property
    def games_won(self) -> int:
        return self.stats.get("total_games_won_vs_cpu", 0) + self.stats.get(
            "total_games_won_vs_human", 0
        )

    def apply_changes(self, changes: dict[str, dict]) -> None:
        """Merge partial settings groups into the account."""
        for name, values in changes.items():
            current = getattr(self, name)
            setattr(self, name, {**current, **values})

    def to_dict(self) -> dict:
        data = {"walletAddress": self.wallet_address}
        for name, (wire_key, _) in PROFILE_GROUPS.items():
            data[wire_key] = group_to_wire(name, getattr(self, name))
        data["referral"] = self.referral.to_dict()
        if self.created_at is not None:
            data["createdAt"] = self.created_at.isoformat()
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at.isoformat()
        return data
