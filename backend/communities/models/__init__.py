"""ORM Models: users, communities and the community_members roster table."""
