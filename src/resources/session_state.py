import json

from mcp.server.fastmcp import FastMCP

from session.session import Session


def register_resources(mcp: FastMCP, *, session: Session) -> None:
    """
    Register read-only views of the session for MCP clients.
    """

    @mcp.resource(
        "repo-manager://session",
        mime_type="application/json",
        description="Registered repositories (tokens masked) and the current folder",
    )
    def session_state() -> str:
        state = session.navigator.state
        payload = {
            "summary": session.summary(),
            "repositories": [
                {"id": r.id, "full_name": r.full_name, "token": r.masked_token}
                for r in session.registry
            ],
            "listing": [e.to_dict() for e in state.current_listing],
            "error": str(state.error) if state.error else None,
        }
        return json.dumps(payload, indent=2)
