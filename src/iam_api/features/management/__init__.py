"""Entity lifecycle management shared by users, groups and roles."""
