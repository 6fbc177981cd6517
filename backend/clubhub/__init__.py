"""ClubHub: backend for the club website builder."""
