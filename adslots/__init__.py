"""
adslots - time-boxed advertising slot NFTs.

Mints ad slot tokens with non-overlapping promotion windows, pins their
metadata to IPFS, rotates the active ad on-chain and lists tokens on a
marketplace.
"""

__version__ = "0.1.0"
