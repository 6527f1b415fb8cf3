from langchain_core.utils.function_calling import convert_to_openai_tool

from pr_report.agent.registry import ToolRegistry
from pr_report.agent.schema import ReportSchema
from pr_report.agent.tools import (
    RESPONSE_TOOL_NAME,
    RETRIEVAL_TOOL_DESCRIPTION,
    RETRIEVAL_TOOL_NAME,
)
from pr_report.report.service import SYSTEM_PROMPT


def test_system_prompt_requires_the_reference_book() -> None:
    assert "Pull Requests and Code Review" in SYSTEM_PROMPT
    assert "*must* use the book" in SYSTEM_PROMPT


def test_retrieval_tool_advertises_the_book_outline() -> None:
    assert RETRIEVAL_TOOL_NAME == "retrieve_pull_requests_code_review"
    assert "Use the right tone in your comments" in RETRIEVAL_TOOL_DESCRIPTION
    assert "Some conflicts can't be solved in comments" in RETRIEVAL_TOOL_DESCRIPTION


def test_report_schema_uses_wire_field_names() -> None:
    schema = ReportSchema.model_json_schema(by_alias=True)

    assert set(schema["required"]) == {
        "descriptionReport",
        "descriptionReportBookReferences",
        "descriptionGrade",
        "descriptionGradeReasoning",
        "commentReports",
    }
    assert schema["properties"]["descriptionGrade"]["enum"] == ["A", "B", "C", "D"]


def test_tools_are_exposed_to_the_model_under_their_wire_names(registry: ToolRegistry) -> None:
    tools = {
        definition["function"]["name"]: convert_to_openai_tool(definition)
        for definition in registry.tool_definitions()
    }

    assert set(tools) == {RETRIEVAL_TOOL_NAME, RESPONSE_TOOL_NAME}
    parameters = tools[RESPONSE_TOOL_NAME]["function"]["parameters"]
    assert set(parameters["properties"]) == {
        "descriptionReport",
        "descriptionReportBookReferences",
        "descriptionGrade",
        "descriptionGradeReasoning",
        "commentReports",
    }
    comment = parameters["properties"]["commentReports"]["items"]
    assert "commentId" in comment["properties"]
    assert "isAutomated" in comment["required"]
    assert "$defs" not in parameters

    retrieval = tools[RETRIEVAL_TOOL_NAME]["function"]["parameters"]
    assert retrieval["required"] == ["query"]
