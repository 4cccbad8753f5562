"""Constants shared by the consensus sequence transforms."""

CS_NAME = "consensus_sequence"
