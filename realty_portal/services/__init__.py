"""Application services shared by the HTTP routers and the operator CLI."""
