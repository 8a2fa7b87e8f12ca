"""Sum the USD value of a set of Solana wallets."""
