"""Structured result the agent must hand back through the `Response` tool.

Field names follow Python convention; the camelCase aliases are the wire
contract the model fills in and the JSON the entry points emit.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Grade = Literal["A", "B", "C", "D"]


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CommentReport(_AliasedModel):
    comment_id: int = Field(alias="commentId", description="The ID of the comment")
    is_automated: bool = Field(
        alias="isAutomated",
        description="Whether the comment is automated (posted by a bot)",
    )
    comment_report: str = Field(
        alias="commentReport",
        description=(
            "A report about the comment. Should include answers to questions such as "
            "but not limited to: Does it offer constructive feedback? Does it foster "
            "valuable conversation? Is the tone nice?"
        ),
    )
    comment_report_book_references: list[str] = Field(
        alias="commentReportBookReferences",
        description="Chapters referenced in the comment report.",
    )
    comment_grade: Grade = Field(
        alias="commentGrade",
        description=(
            "A grade to evaluate the comment: A if it is great, B if it is okay but can "
            "be improved, C if it needs improvement to be valuable, D if its content or "
            "tone is problematic."
        ),
    )
    comment_grade_reasoning: str = Field(
        alias="commentGradeReasoning",
        description="Detail your reasoning for assigning this grade.",
    )


class ReportSchema(_AliasedModel):
    """Review report covering the PR description and each of its comments."""

    description_report: str = Field(
        alias="descriptionReport",
        description=(
            "A report about the PR description. Should include answers to questions "
            "such as but not limited to: Is it complete? Does it contain the necessary "
            "context? Does the tone invite to review the PR?"
        ),
    )
    description_report_book_references: list[str] = Field(
        alias="descriptionReportBookReferences",
        description="Chapters referenced in the description report.",
    )
    description_grade: Grade = Field(
        alias="descriptionGrade",
        description=(
            "A grade to evaluate the PR description: A if this description is great, "
            "B if it is okay but can be improved, C if it needs improvement to be "
            "valuable, D if its content or tone is problematic."
        ),
    )
    description_grade_reasoning: str = Field(
        alias="descriptionGradeReasoning",
        description="Detail your reasoning for assigning this grade.",
    )
    comment_reports: list[CommentReport] = Field(
        alias="commentReports",
        description="Reports about each PR comment",
    )

    def to_wire(self) -> dict[str, object]:
        """JSON-ready dict using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)
