MAX_LEADERBOARD_SIZE = 100


class LeaderboardEntry:
    def __init__(self, rank: int, wallet_address: str, display_name: str, balls_pocketed: int, games_won: int):
        self.rank = rank
        self.wallet_address = wallet_address
        self.display_name = display_name
        self.balls_pocketed = balls_pocketed
        self.games_won = games_won

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "walletAddress": self.wallet_address,
            "playerName": self.display_name,
            "totalBallsPocketed": self.balls_pocketed,
            "totalGamesWon": self.games_won,
        }


def top_players(repository, limit: int = MAX_LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    """Players ranked by balls pocketed, best first. Ties keep store order."""
    limit = max(1, min(int(limit), MAX_LEADERBOARD_SIZE))
    accounts = repository.top_by_balls_pocketed(limit)
    return [
        LeaderboardEntry(
            rank,
            account.wallet_address,
            account.display_name,
            account.stats.get("total_balls_pocketed", 0),
            account.games_won,
        )
        for rank, account in enumerate(accounts, start=1)
    ]
