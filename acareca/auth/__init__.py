"""User, identity-provider and session models with their in-memory storage."""