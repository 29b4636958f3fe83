"""Services used by the cazdo session: git, Azure DevOps, caching and fetching."""
