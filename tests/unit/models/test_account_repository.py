import pytest

from pool_backend.domain.accounts import Account
from pool_backend.errors import ReferralCodeTaken

WALLET = "0xAbCdEf0123456789abcdef0123456789ABCDEF01"
OTHER = "0x" + "2" * 40


def test_find_missing(account_repository):
    assert account_repository.find(WALLET) is None


def test_get_or_create_normalizes_and_is_idempotent(account_repository):
    created = account_repository.get_or_create(WALLET)
    again = account_repository.get_or_create(WALLET.lower())

    assert created.id == again.id
    assert created.wallet_address == WALLET.lower()
    assert created.player_data["player_names1"] == "0g-Panda"
    assert created.created_at is not None


def test_get_or_create_recovers_from_concurrent_insert(mocker, account_repository):
    account_repository.get_or_create(WALLET)
    # Simulate the lookup racing with another request's insert
    mocker.patch.object(
        account_repository,
        "find",
        side_effect=[None, account_repository.find(WALLET)],
    )

    account = account_repository.get_or_create(WALLET)

    assert account.wallet_address == WALLET.lower()


def test_save_new_account(account_repository):
    account = Account(WALLET)
    account.apply_changes({"stats": {"total_balls_pocketed": 9}})

    saved = account_repository.save(account)

    assert saved.stats["total_balls_pocketed"] == 9


def test_update_profile_merges_groups(account_repository):
    account_repository.update_profile(WALLET, {"game_settings": {"sound_enabled": False}})
    account = account_repository.update_profile(WALLET, {"game_settings": {"music_enabled": False}})

    assert account.game_settings["sound_enabled"] is False
    assert account.game_settings["music_enabled"] is False
    assert account.game_settings["auto_aim_enabled"] is True


def test_update_profile_never_touches_referral(account_repository):
    account_repository.get_or_create(WALLET)
    account_repository.assign_referral_code(WALLET, "AB12CD34")
    stale = account_repository.find(WALLET)
    account_repository.increment_referral_count("AB12CD34")

    stale.apply_changes({"misc": {"ads_removed": False}})
    account_repository.save(stale)

    referral = account_repository.find(WALLET).referral
    assert referral.code == "AB12CD34"
    assert referral.count == 1


def test_set_player_name(account_repository):
    assert account_repository.set_player_name(WALLET, "Shark") is None
    account_repository.get_or_create(WALLET)
    assert account_repository.set_player_name(WALLET, "Shark").display_name == "Shark"


def test_assign_referral_code_once(account_repository):
    account_repository.get_or_create(WALLET)

    assert account_repository.assign_referral_code(WALLET, "AB12CD34") is True
    assert account_repository.assign_referral_code(WALLET, "FFFF0000") is False
    assert account_repository.find(WALLET).referral.code == "AB12CD34"
    assert account_repository.find_by_referral_code("AB12CD34").wallet_address == WALLET.lower()


def test_assign_referral_code_taken(account_repository):
    account_repository.get_or_create(WALLET)
    account_repository.get_or_create(OTHER)
    account_repository.assign_referral_code(WALLET, "AB12CD34")

    with pytest.raises(ReferralCodeTaken):
        account_repository.assign_referral_code(OTHER, "AB12CD34")
    assert account_repository.find(OTHER).referral.code is None


def test_mark_referred_by_once(account_repository):
    account_repository.get_or_create(WALLET)

    assert account_repository.mark_referred_by(WALLET, "AB12CD34") is True
    assert account_repository.mark_referred_by(WALLET, "FFFF0000") is False
    assert account_repository.find(WALLET).referral.referred_by == "AB12CD34"


def test_increment_referral_count(account_repository):
    account_repository.get_or_create(WALLET)
    account_repository.assign_referral_code(WALLET, "AB12CD34")

    assert account_repository.increment_referral_count("AB12CD34") == 1
    assert account_repository.increment_referral_count("AB12CD34") == 2
    assert account_repository.increment_referral_count("ZZZZ0000") is None


def test_count_and_set_referral_count(account_repository):
    account_repository.get_or_create(WALLET)
    account_repository.assign_referral_code(WALLET, "AB12CD34")
    account_repository.get_or_create(OTHER)
    account_repository.mark_referred_by(OTHER, "AB12CD34")

    assert account_repository.count_referred_by("AB12CD34") == 1
    account_repository.set_referral_count(WALLET, 1)
    assert account_repository.find(WALLET).referral.count == 1
    assert [a.wallet_address for a in account_repository.get_referrers()] == [WALLET.lower()]


def test_top_by_balls_pocketed(account_repository, seed_players):
    seed_players(
        ("0x" + "1" * 40, "One", 5, 0, 0),
        ("0x" + "2" * 40, "Two", 20, 0, 0),
        ("0x" + "3" * 40, "Three", 5, 0, 0),
        ("0x" + "4" * 40, "Four", 1, 0, 0),
    )

    top = account_repository.top_by_balls_pocketed(3)

    assert [a.display_name for a in top] == ["Two", "One", "Three"]
