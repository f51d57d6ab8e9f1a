"""
djed-reserve: reserve engine for a collateral-backed two-token stablecoin
"""
