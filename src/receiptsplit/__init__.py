"""Receipt bill splitting: allocation of receipt totals across group members."""
