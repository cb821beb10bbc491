"""
User prompts for MCP

Pure template renderers that embed their arguments into fixed
natural-language instructions. Templates are dedented once, before any
argument is substituted, so argument text is inserted verbatim.
"""

from textwrap import dedent

from .prompt_registry import Prompt, PromptHandler
from .schemas import GenerateFakeUserInput, GenerateUserListInput, GenerateUserReportInput

FAKE_USER_TEMPLATE = dedent(
    """\
    Generate a fake user with the name "{name}" and return the details in JSON format with the following structure:
    {{
      "name": "string",
      "email": "string (valid email format)",
      "address": "string (realistic address)",
      "phone": "string (phone number)"
    }}

    Make sure the data is realistic and properly formatted."""
)

USER_REPORT_TEMPLATE = dedent(
    """\
    Generate a detailed report for user with ID {user_id}. The report should include:
    1. User profile summary
    2. Account status
    3. Recent activity (if available)
    4. Recommendations or suggestions

    Format the report in a clear, professional manner."""
)

USER_LIST_TEMPLATE = dedent(
    """\
    Generate a user list in {format} format{limit}. Include the following information for each user:
    - ID
    - Name
    - Email
    - Address
    - Phone

    Make sure the data is well-formatted and easy to read."""
)


class GenerateFakeUserPrompt(PromptHandler):
    def get_prompt_definition(self) -> Prompt:
        return Prompt(
            name="generate-fake-user",
            description="Generate fake user based on given name",
            input_model=GenerateFakeUserInput,
        )

    def render(self, params: GenerateFakeUserInput) -> str:
        return FAKE_USER_TEMPLATE.format(name=params.name)


class GenerateUserReportPrompt(PromptHandler):
    def get_prompt_definition(self) -> Prompt:
        return Prompt(
            name="generate-user-report",
            description="Generate a detailed report for a specific user",
            input_model=GenerateUserReportInput,
        )

    def render(self, params: GenerateUserReportInput) -> str:
        return USER_REPORT_TEMPLATE.format(user_id=params.userId)


class GenerateUserListPrompt(PromptHandler):
    def get_prompt_definition(self) -> Prompt:
        return Prompt(
            name="generate-user-list",
            description="Generate a formatted list of users",
            input_model=GenerateUserListInput,
        )

    def render(self, params: GenerateUserListInput) -> str:
        limit = f" (limit to {params.limit} users)" if params.limit else ""
        return USER_LIST_TEMPLATE.format(format=params.format, limit=limit)
