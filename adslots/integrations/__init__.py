"""
External service integrations: IPFS pinning, the ad slot contract and the
NFT marketplace.
"""
