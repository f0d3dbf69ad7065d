"""
Stake pool rebalance bot.

Keeps one SPL stake pool updated and moves idle reserve stake to a
preferred validator near the end of each epoch.
"""
