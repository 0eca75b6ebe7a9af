"""Server bootstrap for the GitHub repository manager MCP service.

Creates the FastMCP instance, builds the session and local sandbox, wires
the tools, registers resources and prompts, and starts the MCP server
(stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL, PROJECT_ROOT
from core.log import configure_logging
from session.session import build_session
from sources.local_source import LocalSource

from tools.browse import register as register_browse
from tools.files import register as register_files
from tools.repositories import register as register_repositories

from resources.session_state import register_resources
from prompts.manager_prompt import register_prompts

mcp = FastMCP("github-repo-manager")


def register_all() -> None:
    session = build_session()
    local = LocalSource(project_root=PROJECT_ROOT)

    register_repositories(mcp, session=session, local=local)
    register_browse(mcp, session=session)
    register_files(mcp, session=session, local=local)

    register_resources(mcp, session=session)
    register_prompts(mcp)


register_all()


def main() -> None:
    configure_logging(LOG_LEVEL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
