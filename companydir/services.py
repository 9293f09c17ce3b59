from dataclasses import dataclass
from typing import Optional

from .codec import DEFAULT_KEY_PREFIX, RecordCodec
from .directory import CompanyDirectory
from .env import Settings, get_settings
from .logger import StructuredLogger
from .relations import BlockIndex, FollowIndex
from .reviews import ReviewLedger
from .salaries import SalaryLedger
from .storage import KeyValueStore, open_store


@dataclass
class CompanyServices:
    """Every component wired over one shared store."""

    codec: RecordCodec
    directory: CompanyDirectory
    reviews: ReviewLedger
    salaries: SalaryLedger
    follows: FollowIndex
    blocks: BlockIndex

    @classmethod
    def over(
        cls,
        store: KeyValueStore,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        logger: Optional[StructuredLogger] = None,
    ) -> "CompanyServices":
        codec = RecordCodec(store, key_prefix=key_prefix, logger=logger)
        directory = CompanyDirectory(codec)
        return cls(
            codec=codec,
            directory=directory,
            reviews=ReviewLedger(codec, directory),
            salaries=SalaryLedger(codec, directory),
            follows=FollowIndex(codec, directory),
            blocks=BlockIndex(codec, directory),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CompanyServices":
        settings = settings or get_settings()
        return cls.over(open_store(settings), key_prefix=settings.key_prefix)
