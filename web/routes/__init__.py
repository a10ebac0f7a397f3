"""
API routes package

One router module per feature:
- health: health check
- months: month sequence, stats, advance, reconcile
- members: member CRUD, families, unpaid
- tokens: token assignment and audit
- winners: winner declaration, winner board, member history
- messages: bulk WhatsApp messages
"""
