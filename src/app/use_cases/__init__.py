"""
Use Cases

Organized into domain folders:
- auth/: Identity sync
- workspaces/: Workspace, membership and catalog management
- invites/: Invite codes and redemption
- points/: Balances and credits
- rewards/: Reward issuance, webhooks and reconciliation

Import from subdirectories.
"""
