from dataclasses import dataclass
from pymongo import ASCENDING


@dataclass(frozen=True)
class IndexSpec:
    keys: tuple[tuple[str, int], ...]
    unique: bool = False

    @classmethod
    def on(cls, *fields: str, unique: bool = False) -> "IndexSpec":
        return cls(keys=tuple((name, ASCENDING) for name in fields), unique=unique)

    def key_list(self) -> list[tuple[str, int]]:
        return list(self.keys)


# Collections reset for the test environment, with the indexes they must carry afterwards.
RESET_PLAN: list[tuple[str, list[IndexSpec]]] = [
    ("users", [
        IndexSpec.on("id", unique=True),
        IndexSpec.on("referralCode", unique=True),
        IndexSpec.on("phone"),
    ]),
    ("clips", [IndexSpec.on("name", unique=True)]),
    ("movies", [IndexSpec.on("name", unique=True)]),
    ("contests", [IndexSpec.on("title", unique=True)]),
    ("playTrackers", [IndexSpec.on("contestId", "userId", unique=True)]),
    ("wallets", [IndexSpec.on("userId", unique=True)]),
    ("walletTransactions", [IndexSpec.on("userId")]),
    ("notifications", [IndexSpec.on("userId")]),
    ("notificationRequests", [
        IndexSpec.on("userId"),
        IndexSpec.on("status"),
    ]),
    ("specialReferralCodes", [IndexSpec.on("referralCode", unique=True)]),
    ("adminUsers", [IndexSpec.on("phone", unique=True)]),
]

COLLECTIONS: list[str] = [name for name, _ in RESET_PLAN]
