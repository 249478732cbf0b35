"""
Services Layer

Pure tournament logic that:
- Accepts domain values (TournamentState, Round, Match, player names)
- Returns new domain values; inputs are never mutated
- Does NOT depend on HTTP request/response objects
- Does NOT touch storage (state_store.py is the only persistence seam)
"""
