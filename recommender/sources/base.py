"""Abstract interfaces for the data-access collaborators of the recommender."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from recommender.core.schemas import EmploymentType, JobPosting, PreferenceProfile


class SearchContext(BaseModel):
    """Which postings a source should return for one recommendation request."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=50, ge=1)
    active_only: bool = True
    employment_types: list[EmploymentType] = Field(default_factory=list)


class PostingSource(ABC):
    """Base class that every posting source must implement.

    Pagination and active-only filtering happen here, not in the core.
    """

    @abstractmethod
    async def fetch_postings(self, context: SearchContext) -> list[JobPosting]:
        """Return the candidate postings for a search context."""


class ProfileSource(ABC):
    """Base class that every profile source must implement."""

    @abstractmethod
    async def get_profile(self, subject_id: str) -> PreferenceProfile:
        """Return the profile for a subject.

        Raises:
            LookupError: If no profile exists for subject_id.
        """
