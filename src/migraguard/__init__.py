"""migraguard: migration safety checks and guarded migration tooling for AI agents."""
