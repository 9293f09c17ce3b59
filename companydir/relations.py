"""
Follow and block relations between users and companies.

Follows are per user and feed the company's follow_count aggregate.
Blocks form one process-wide set. The set is authoritative for filtering;
Company.is_blocked mirrors it for display only, and the two are written
separately so they can disagree after a failed or interleaved write.
"""

from typing import Dict, List, Optional, Set

from .aggregates import follow_count, refresh_company
from .codec import RecordCodec
from .directory import CompanyDirectory
from .ids import utc_timestamp
from .logger import StructuredLogger
from .models import FollowRelation


class FollowIndex:
    def __init__(
        self,
        codec: RecordCodec,
        directory: CompanyDirectory,
        logger: Optional[StructuredLogger] = None,
    ):
        self.codec = codec
        self.directory = directory
        self.logger = logger or codec.logger

    def follow(self, company_name: str, user_id: str) -> None:
        """Follow a company. Following twice is a no-op."""
        follows = self.codec.read_follows()
        relations = follows.setdefault(user_id, [])
        if any(r.company_name == company_name for r in relations):
            return
        relations.append(FollowRelation(company_name=company_name, followed_at=utc_timestamp()))
        if not self.codec.write_follows(follows):
            return
        self._refresh(company_name, follows)

    def unfollow(self, company_name: str, user_id: str) -> None:
        """Stop following a company. Unfollowing twice is a no-op."""
        follows = self.codec.read_follows()
        relations = follows.get(user_id, [])
        remaining = [r for r in relations if r.company_name != company_name]
        if len(remaining) != len(relations):
            if remaining:
                follows[user_id] = remaining
            else:
                del follows[user_id]
            if not self.codec.write_follows(follows):
                return
        self._refresh(company_name, follows)

    def _refresh(self, company_name: str, follows: Dict[str, List[FollowRelation]]) -> None:
        refresh_company(
            self.directory,
            company_name,
            {"follow_count": follow_count(follows, company_name)},
        )

    def is_followed(self, company_name: str, user_id: str) -> bool:
        return any(r.company_name == company_name for r in self.list_for(user_id))

    def list_for(self, user_id: str) -> List[FollowRelation]:
        """The user's follows in storage order; empty when none."""
        return list(self.codec.read_follows().get(user_id, []))

    def count_for(self, company_name: str) -> int:
        """Follower count computed from the relations, not the stored aggregate."""
        return follow_count(self.codec.read_follows(), company_name)


class BlockIndex:
    def __init__(
        self,
        codec: RecordCodec,
        directory: CompanyDirectory,
        logger: Optional[StructuredLogger] = None,
    ):
        self.codec = codec
        self.directory = directory
        self.logger = logger or codec.logger

    def block(self, company_name: str) -> None:
        blocked = self.codec.read_blocked()
        if company_name not in blocked:
            blocked.append(company_name)
            if not self.codec.write_blocked(blocked):
                return
            self.logger.info("Company blocked", company=company_name)
        self._set_flag(company_name, True)

    def unblock(self, company_name: str) -> None:
        blocked = self.codec.read_blocked()
        if company_name in blocked:
            remaining = [name for name in blocked if name != company_name]
            if not self.codec.write_blocked(remaining):
                return
            self.logger.info("Company unblocked", company=company_name)
        self._set_flag(company_name, False)

    def _set_flag(self, company_name: str, value: bool) -> None:
        # Written with save(): the upsert merge would ignore False.
        company = self.directory.get(company_name)
        if company is None or company.is_blocked == value:
            return
        company.is_blocked = value
        self.directory.save(company)

    def is_blocked(self, company_name: str) -> bool:
        return company_name in self.codec.read_blocked()

    def list_blocked(self) -> Set[str]:
        return set(self.codec.read_blocked())
