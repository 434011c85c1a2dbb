"""Jenkins build parameter model."""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class BuildParameters(BaseModel):
    """Parameters passed to the deploy job.

    Attributes:
        repo_owner: Repository owner (REPO_OWNER).
        repo_name: Repository name (REPO_NAME).
        branch: Branch to deploy (BRANCH).
        user_id: User the deployment belongs to (USER_ID).
        commit_sha: Head commit of a push (COMMIT_SHA). Absent for the
            initial build issued at registration.
    """

    repo_owner: str = Field(..., min_length=1)
    repo_name: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    commit_sha: Optional[str] = None

    def as_query(self) -> Dict[str, str]:
        """Return the Jenkins parameter names and values."""
        query = {
            "REPO_OWNER": self.repo_owner,
            "REPO_NAME": self.repo_name,
            "BRANCH": self.branch,
            "USER_ID": self.user_id,
        }
        if self.commit_sha is not None:
            query["COMMIT_SHA"] = self.commit_sha
        return query
