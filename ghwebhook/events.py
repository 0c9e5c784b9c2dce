"""Typed GitHub webhook events.

Each supported ``X-GitHub-Event`` tag maps to one `Event` subclass. Only the
fields handlers commonly need are declared; everything else GitHub sends is
kept as extra attributes, so nothing in a payload is lost.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from ghwebhook.errors import DecodeError

Json = dict[str, Any]


class Event(BaseModel):
    """Envelope fields shared by most deliveries."""

    model_config = ConfigDict(extra="allow")

    event_type: ClassVar[str] = ""

    action: str | None = None
    repository: Json | None = None
    sender: Json | None = None
    organization: Json | None = None
    installation: Json | None = None


class CommitCommentEvent(Event):
    event_type: ClassVar[str] = "commit_comment"

    comment: Json | None = None


class CreateEvent(Event):
    event_type: ClassVar[str] = "create"

    ref: str | None = None
    ref_type: str | None = None
    master_branch: str | None = None
    description: str | None = None
    pusher_type: str | None = None


class DeleteEvent(Event):
    event_type: ClassVar[str] = "delete"

    ref: str | None = None
    ref_type: str | None = None
    pusher_type: str | None = None


class DeploymentEvent(Event):
    event_type: ClassVar[str] = "deployment"

    deployment: Json | None = None


class DeploymentStatusEvent(Event):
    event_type: ClassVar[str] = "deployment_status"

    deployment: Json | None = None
    deployment_status: Json | None = None


class ForkEvent(Event):
    event_type: ClassVar[str] = "fork"

    forkee: Json | None = None


class GollumEvent(Event):
    event_type: ClassVar[str] = "gollum"

    pages: list[Json] | None = None


class InstallationEvent(Event):
    event_type: ClassVar[str] = "installation"

    repositories: list[Json] | None = None


class InstallationRepositoriesEvent(Event):
    event_type: ClassVar[str] = "installation_repositories"

    repository_selection: str | None = None
    repositories_added: list[Json] | None = None
    repositories_removed: list[Json] | None = None


class IssueCommentEvent(Event):
    event_type: ClassVar[str] = "issue_comment"

    issue: Json | None = None
    comment: Json | None = None
    changes: Json | None = None


class IssuesEvent(Event):
    event_type: ClassVar[str] = "issues"

    issue: Json | None = None
    assignee: Json | None = None
    label: Json | None = None
    changes: Json | None = None


class LabelEvent(Event):
    event_type: ClassVar[str] = "label"

    label: Json | None = None
    changes: Json | None = None


class MemberEvent(Event):
    event_type: ClassVar[str] = "member"

    member: Json | None = None
    changes: Json | None = None


class MembershipEvent(Event):
    event_type: ClassVar[str] = "membership"

    scope: str | None = None
    member: Json | None = None
    team: Json | None = None


class MilestoneEvent(Event):
    event_type: ClassVar[str] = "milestone"

    milestone: Json | None = None
    changes: Json | None = None


class OrganizationEvent(Event):
    event_type: ClassVar[str] = "organization"

    invitation: Json | None = None
    membership: Json | None = None


class OrgBlockEvent(Event):
    event_type: ClassVar[str] = "org_block"

    blocked_user: Json | None = None


class PageBuildEvent(Event):
    event_type: ClassVar[str] = "page_build"

    id: int | None = None
    build: Json | None = None


class PingEvent(Event):
    event_type: ClassVar[str] = "ping"

    zen: str | None = None
    hook_id: int | None = None
    hook: Json | None = None


class ProjectEvent(Event):
    event_type: ClassVar[str] = "project"

    project: Json | None = None
    changes: Json | None = None


class ProjectCardEvent(Event):
    event_type: ClassVar[str] = "project_card"

    project_card: Json | None = None
    after_id: int | None = None
    changes: Json | None = None


class ProjectColumnEvent(Event):
    event_type: ClassVar[str] = "project_column"

    project_column: Json | None = None
    after_id: int | None = None
    changes: Json | None = None


class PublicEvent(Event):
    event_type: ClassVar[str] = "public"


class PullRequestReviewEvent(Event):
    event_type: ClassVar[str] = "pull_request_review"

    review: Json | None = None
    pull_request: Json | None = None


class PullRequestReviewCommentEvent(Event):
    event_type: ClassVar[str] = "pull_request_review_comment"

    comment: Json | None = None
    pull_request: Json | None = None
    changes: Json | None = None


class PullRequestEvent(Event):
    event_type: ClassVar[str] = "pull_request"

    number: int | None = None
    pull_request: Json | None = None
    changes: Json | None = None


class PushEvent(Event):
    event_type: ClassVar[str] = "push"

    ref: str | None = None
    before: str | None = None
    after: str | None = None
    created: bool | None = None
    deleted: bool | None = None
    forced: bool | None = None
    base_ref: str | None = None
    compare: str | None = None
    commits: list[Json] | None = None
    head_commit: Json | None = None
    pusher: Json | None = None


class RepositoryEvent(Event):
    event_type: ClassVar[str] = "repository"

    changes: Json | None = None


class ReleaseEvent(Event):
    event_type: ClassVar[str] = "release"

    release: Json | None = None
    changes: Json | None = None


class StatusEvent(Event):
    event_type: ClassVar[str] = "status"

    id: int | None = None
    sha: str | None = None
    name: str | None = None
    state: str | None = None
    context: str | None = None
    description: str | None = None
    target_url: str | None = None
    branches: list[Json] | None = None
    commit: Json | None = None


class TeamEvent(Event):
    event_type: ClassVar[str] = "team"

    team: Json | None = None
    changes: Json | None = None


class TeamAddEvent(Event):
    event_type: ClassVar[str] = "team_add"

    team: Json | None = None


class WatchEvent(Event):
    event_type: ClassVar[str] = "watch"


EVENT_CLASSES: tuple[type[Event], ...] = (
    CommitCommentEvent,
    CreateEvent,
    DeleteEvent,
    DeploymentEvent,
    DeploymentStatusEvent,
    ForkEvent,
    GollumEvent,
    InstallationEvent,
    InstallationRepositoriesEvent,
    IssueCommentEvent,
    IssuesEvent,
    LabelEvent,
    MemberEvent,
    MembershipEvent,
    MilestoneEvent,
    OrganizationEvent,
    OrgBlockEvent,
    PageBuildEvent,
    PingEvent,
    ProjectEvent,
    ProjectCardEvent,
    ProjectColumnEvent,
    PublicEvent,
    PullRequestReviewEvent,
    PullRequestReviewCommentEvent,
    PullRequestEvent,
    PushEvent,
    RepositoryEvent,
    ReleaseEvent,
    StatusEvent,
    TeamEvent,
    TeamAddEvent,
    WatchEvent,
)

EVENT_TYPES: dict[str, type[Event]] = {cls.event_type: cls for cls in EVENT_CLASSES}

# Tags GitHub Apps used before the "installation" names settled.
_ALIASES: dict[str, str] = {
    "integration_installation": "installation",
    "integration_installation_repositories": "installation_repositories",
}


def event_class_for(event_type: str) -> type[Event] | None:
    """Return the model for an ``X-GitHub-Event`` tag, or None if unsupported."""
    return EVENT_TYPES.get(_ALIASES.get(event_type, event_type))


def parse_webhook(event_type: str, payload: bytes) -> Event:
    """Decode a delivery body into the event model for *event_type*.

    Raises `DecodeError` for unknown tags and for bodies that are not a JSON
    object of the expected shape.
    """
    cls = event_class_for(event_type)
    if cls is None:
        msg = f"unknown X-GitHub-Event type: {event_type!r}"
        raise DecodeError(msg)
    try:
        return cls.model_validate_json(payload)
    except ValidationError as exc:
        msg = f"invalid {event_type} payload: {exc.error_count()} error(s)"
        raise DecodeError(msg) from exc
