"""Network domain: users, follows and activity logs."""
