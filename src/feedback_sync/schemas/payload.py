"""Provider-agnostic content rendered for remote items and comments."""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from .domain import FeedbackSnapshot, ProjectSnapshot

SOURCE_NAME = "FeedbackKit"


class ItemPayload(BaseModel):
    """Title, body and tags sent to any provider when creating an item."""

    title: str
    body: str
    tags: list[str] = Field(default_factory=list)


def merge_tags(*groups: Iterable[str] | None) -> list[str]:
    """Concatenate tag groups, dropping blanks and duplicates (first wins)."""
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for tag in group or ():
            tag = tag.strip()
            if tag and tag not in seen:
                seen.add(tag)
                merged.append(tag)
    return merged


def render_description(feedback: FeedbackSnapshot, project: ProjectSnapshot) -> str:
    """Render the Markdown body for a new remote item."""
    lines = [
        f"## {feedback.category.display_name}",
        "",
        feedback.description,
        "",
        "---",
        "",
        f"**Source:** {SOURCE_NAME}",
        f"**Project:** {project.name}",
        f"**Status:** {feedback.status.display_name}",
        f"**Votes:** {feedback.vote_count}",
    ]
    if feedback.mrr is not None and feedback.mrr > 0:
        lines.append(f"**MRR:** ${feedback.mrr:.2f}")
    if feedback.submitter_email:
        lines.append(f"**Submitted by:** {feedback.submitter_email}")
    return "\n".join(lines)


def build_item_payload(
    feedback: FeedbackSnapshot,
    project: ProjectSnapshot,
    tags: Iterable[str] | None = None,
) -> ItemPayload:
    """Build the create payload once, independent of the target provider."""
    return ItemPayload(
        title=feedback.title,
        body=render_description(feedback, project),
        tags=merge_tags(tags),
    )


def render_comment(text: str, author_label: str) -> str:
    """Render a feedback comment for posting on a remote item."""
    return f"**[{author_label}] Comment:**\n\n{text}\n\n---\n_Synced from {SOURCE_NAME}_"
