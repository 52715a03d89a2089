"""Architecture drift: snapshots, comparison, narratives, git worktrees and commit history."""