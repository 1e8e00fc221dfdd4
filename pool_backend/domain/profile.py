"""
Profile settings schema.

Each field group the game client persists is described by an explicit model
with its allowed range and default. Wire keys are the client's camelCase
names; attributes are snake_case. Unknown keys are dropped.
"""

import re
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


class _Group(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlayerData(_Group):
    player_names0: str = Field("", max_length=50, alias="playerNames0")
    player_names1: str = Field("0g-Panda", max_length=50, alias="playerNames1")
    chosen_avatar0: int = Field(0, ge=0, le=10, alias="chosenAvatar0")
    chosen_avatar1: int = Field(7, ge=0, le=10, alias="chosenAvatar1")
    selected_cue0: int = Field(1, ge=0, le=5, alias="selectedCue0")
    selected_cue1: int = Field(1, ge=0, le=5, alias="selectedCue1")


class ControlSettings(_Group):
    control_mode0: int = Field(2, ge=0, le=2, alias="controlMode0")
    control_mode1: int = Field(2, ge=0, le=2, alias="controlMode1")
    hand_mode0: int = Field(0, ge=0, le=1, alias="handMode0")
    hand_mode1: int = Field(0, ge=0, le=1, alias="handMode1")


class GameSettings(_Group):
    sound_enabled: bool = Field(True, alias="soundEnabled")
    music_vol_val: float = Field(0.75, ge=0, le=1, alias="musicVolVal")
    music_vol_multiplier_in_game: float = Field(
        0.5, ge=0, le=1, alias="musicVolMultiplierInGame"
    )
    sensitivity_value: float = Field(1.0, ge=0.1, le=3, alias="sensitivityValue")
    guide_type: int = Field(2, ge=0, le=3, alias="guideType")
    selected_table: int = Field(0, ge=0, le=9, alias="selectedTable")
    selected_pattern: int = Field(0, ge=0, le=10, alias="selectedPattern")
    room_enabled: bool = Field(True, alias="roomEnabled")
    diamonds_enabled: bool = Field(False, alias="diamondsEnabled")
    red_guide_enabled: bool = Field(True, alias="redGuideEnabled")
    pinch_zoom_enabled: bool = Field(True, alias="pinchZoomEnabled")
    dont_go_to_top_ball_in_hand: bool = Field(True, alias="dontGoToTopBallInHand")
    tap_to_aim_enabled: bool = Field(True, alias="tapToAimEnabled")
    auto_aim_enabled: bool = Field(True, alias="autoAimEnabled")


class Stats(_Group):
    total_time_played: int = Field(0, ge=0, alias="totalTimePlayed")
    total_games_played_vs_cpu: int = Field(0, ge=0, alias="totalGamesPlayedVsCPU")
    total_games_won_vs_cpu: int = Field(0, ge=0, alias="totalGamesWonVsCPU")
    total_games_played_vs_human: int = Field(0, ge=0, alias="totalGamesPlayedVsHuman")
    total_games_won_vs_human: int = Field(0, ge=0, alias="totalGamesWonVsHuman")
    total_balls_pocketed: int = Field(0, ge=0, alias="totalBallsPocketed")
    tt_best_score: int = Field(0, ge=0, alias="ttBestScore")
    matrix_best_score: int = Field(0, ge=0, alias="matrixBestScore")


class Misc(_Group):
    startup_counter: int = Field(0, ge=0, alias="startupCounter")
    user_sel_control_done: bool = Field(False, alias="userSelControlDone")
    ads_removed: bool = Field(True, alias="adsRemoved")
    use_avatar_set2: bool = Field(True, alias="useAvatarSet2")


# Field group name on the account -> (wire key, schema)
PROFILE_GROUPS: dict[str, tuple[str, type[_Group]]] = {
    "player_data": ("playerData", PlayerData),
    "control_settings": ("controlSettings", ControlSettings),
    "game_settings": ("gameSettings", GameSettings),
    "stats": ("stats", Stats),
    "misc": ("misc", Misc),
}

STAT_TYPES = tuple(field.alias for field in Stats.model_fields.values())


def default_group(name: str) -> dict:
    _, schema = PROFILE_GROUPS[name]
    return schema().model_dump()


def group_to_wire(name: str, values: dict) -> dict:
    _, schema = PROFILE_GROUPS[name]
    return schema(**{**default_group(name), **values}).model_dump(by_alias=True)


def normalize_wallet_address(wallet_address: str) -> str:
    return wallet_address.strip().lower()


def _check_wallet_address(value: str) -> str:
    if not WALLET_ADDRESS_PATTERN.match(value or ""):
        raise ValueError("Invalid wallet address format")
    return value


WalletAddress = Annotated[str, AfterValidator(_check_wallet_address)]


class WalletRequest(BaseModel):
    wallet_address: WalletAddress = Field(alias="walletAddress")


class ProfileUpdate(WalletRequest):
    """Body of a profile save. Only the groups and keys supplied are written."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    player_data: Optional[PlayerData] = Field(None, alias="playerData")
    control_settings: Optional[ControlSettings] = Field(None, alias="controlSettings")
    game_settings: Optional[GameSettings] = Field(None, alias="gameSettings")
    stats: Optional[Stats] = None
    misc: Optional[Misc] = None

    def changed_groups(self) -> dict[str, dict]:
        changes = {}
        for name in PROFILE_GROUPS:
            group = getattr(self, name)
            if group is not None:
                changes[name] = group.model_dump(exclude_unset=True)
        return changes


class PlayerNameUpdate(BaseModel):
    player_names0: str = Field(min_length=1, max_length=50, alias="playerNames0")


class StatsFilter(BaseModel):
    stat_type: Optional[str] = Field(None, alias="statType")

    @field_validator("stat_type")
    @classmethod
    def _known_stat(cls, value):
        if value is not None and value not in STAT_TYPES:
            raise ValueError(f"Invalid stat type. Must be one of: {', '.join(STAT_TYPES)}")
        return value


class GenerateReferralRequest(WalletRequest):
    signature: str = Field(min_length=1)
    nonce: Optional[str] = None


class ClaimReferralRequest(WalletRequest):
    referral_code: str = Field(min_length=1, max_length=32, alias="referralCode")
