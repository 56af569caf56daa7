"""Account ledger for SPIGOT faucet.

Features:
- Per-account claim history (last claim time, cumulative amount)
- Lifetime cap guard on every write
- Redis persistence with in-memory fallback for development
"""

import logging
from dataclasses import dataclass

from .errors import ClaimOverflowError

logger = logging.getLogger(__name__)

# Sentinel for an account that has never claimed
NEVER = None

_KEY_PREFIX = "spigot:account:"


@dataclass(frozen=True)
class AccountRecord:
    """Claim history of a single account."""

    last_claim_at: int | None = NEVER  # Unix seconds of last successful claim
    total_claimed: int = 0  # Cumulative base units granted

    @property
    def has_claimed(self) -> bool:
        """Whether the account has ever claimed."""
        return self.last_claim_at is not NEVER


class AccountLedger:
    """Keyed store of account records.

    Records are created implicitly: an unseen account reads as a default
    record and is only stored once it claims. Records are never deleted
    except by :meth:`restore` rolling back a claim that did not complete.

    Parameters
    ----------
    max_claim_amount : int
        Lifetime cap per account, in base units.
    redis_url : str | None
        Redis connection URL. If None, uses in-memory storage.
    """

    def __init__(self, max_claim_amount: int, redis_url: str | None = None):
        self._max_claim_amount = max_claim_amount
        self._redis_url = redis_url
        self._redis = None  # Redis instance or None

        # In-memory fallback storage
        self._memory_records: dict[str, AccountRecord] = {}

        if redis_url:
            self._init_redis(redis_url)

    def _init_redis(self, redis_url: str) -> None:
        """Initialize Redis connection."""
        try:
            from redis import Redis

            self._redis = Redis.from_url(redis_url, decode_responses=True)
            self._redis.ping()
            logger.info("Redis connected for account ledger", extra={"url": redis_url})
        except Exception as e:
            logger.warning(
                "Redis connection failed, using in-memory account ledger",
                extra={"error": str(e)},
            )
            self._redis = None

    @property
    def backend(self) -> str:
        """Name of the active storage backend."""
        return "redis" if self._redis else "memory"

    def _get_key(self, account: str) -> str:
        """Get Redis key for an account record."""
        return f"{_KEY_PREFIX}{account}"

    def get(self, account: str) -> AccountRecord:
        """Get the record for an account.

        Parameters
        ----------
        account : str
            Account identifier.

        Returns
        -------
        AccountRecord
            Stored record, or a default record if the account is unseen.
        """
        if self._redis:
            return self._get_redis(account)
        return self._memory_records.get(account, AccountRecord())

    def _get_redis(self, account: str) -> AccountRecord:
        """Read a record from Redis."""
        data = self._redis.hgetall(self._get_key(account))
        if not data:
            return AccountRecord()
        last_claim_at = data.get("last_claim_at")
        return AccountRecord(
            last_claim_at=int(last_claim_at) if last_claim_at else NEVER,
            total_claimed=int(data.get("total_claimed") or 0),
        )

    def record_claim(self, account: str, amount: int, now: int) -> AccountRecord:
        """Record a successful claim.

        Parameters
        ----------
        account : str
            Account identifier.
        amount : int
            Amount granted, in base units.
        now : int
            Claim time in Unix seconds.

        Returns
        -------
        AccountRecord
            The updated record.

        Raises
        ------
        ValueError
            If amount is not positive.
        ClaimOverflowError
            If the claim would exceed the lifetime cap.
        """
        if amount <= 0:
            raise ValueError("Claim amount must be positive")

        current = self.get(account)
        new_total = current.total_claimed + amount
        if new_total > self._max_claim_amount:
            raise ClaimOverflowError(
                f"Claim of {amount} would exceed lifetime cap of {self._max_claim_amount} "
                f"for {account} (already claimed {current.total_claimed})"
            )

        updated = AccountRecord(last_claim_at=now, total_claimed=new_total)
        self._write(account, updated)

        logger.debug(
            "Claim recorded",
            extra={"account": account, "amount": amount, "total_claimed": new_total},
        )
        return updated

    def restore(self, account: str, record: AccountRecord) -> None:
        """Put back a previously read record.

        Used to roll back a claim whose follow-up step failed.

        Parameters
        ----------
        account : str
            Account identifier.
        record : AccountRecord
            Record as it was before the claim.
        """
        if record == AccountRecord():
            if self._redis:
                self._redis.delete(self._get_key(account))
            else:
                self._memory_records.pop(account, None)
        else:
            self._write(account, record)

        logger.info(
            "Account record restored",
            extra={"account": account, "total_claimed": record.total_claimed},
        )

    def _write(self, account: str, record: AccountRecord) -> None:
        """Persist a record to the active backend."""
        if not self._redis:
            self._memory_records[account] = record
            return

        key = self._get_key(account)
        pipe = self._redis.pipeline()
        pipe.hset(key, mapping={"total_claimed": str(record.total_claimed)})
        if record.last_claim_at is NEVER:
            pipe.hdel(key, "last_claim_at")
        else:
            pipe.hset(key, "last_claim_at", str(record.last_claim_at))
        pipe.execute()

    def accounts(self) -> list[str]:
        """List every account that has a stored record."""
        if self._redis:
            return [key[len(_KEY_PREFIX) :] for key in self._redis.scan_iter(f"{_KEY_PREFIX}*")]
        return list(self._memory_records)

    def ping(self) -> bool:
        """Check that the storage backend is reachable."""
        if self._redis:
            return bool(self._redis.ping())
        return True
