from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    @mcp.prompt(
        name="manage_repository",
        description="Step-by-step guidance for browsing and editing files in a registered GitHub repository",
    )
    def manage_repository_prompt(goal: str = "") -> str:
        return f"""
You manage files in GitHub repositories through the tools of this server.
User goal: {goal or "(not stated; ask what they want to change)"}

==================================================
SETUP
==================================================
1) Call list_repositories.
2) If the target repository is missing, call add_repository with
   owner, repo and token. Only pass confirm=true after the user agreed
   to use an unusual token or to replace an existing token.
3) Call select_repository with the repository id.

==================================================
BROWSING
==================================================
- navigate(path) lists a folder; '' is the root.
- Use the breadcrumbs paths to move up.
- read_file(path) returns content AND sha. Keep the sha.

==================================================
CHANGING FILES
==================================================
- Edit: read_file, then save_file with the SAME sha.
  If save_file reports a conflict, read the file again and redo the edit.
  Never retry blindly.
- New file / folder: create_file or create_folder in the current folder.
  Names: letters, digits, '.', '_' and '-' only.
- Rename: rename_entry. It copies then deletes. If it reports that the
  original could not be deleted, tell the user both files now exist.
- Delete: ask the user first, then delete_entry with confirm=true.
- Upload: upload_files with local paths under the project root
  (100 MiB total per batch). Report per-file errors.

==================================================
FINAL RULE
==================================================
Report every notification (title and message) back to the user.
"""
