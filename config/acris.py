"""
ACRIS Configuration - document/party datasets and normalization defaults.

Table names match the denormalized ACRIS views loaded into the nyc_property
PostgreSQL database (one row per document per BBL, one row per party).
"""

from pathlib import Path

# Source tables
DOCUMENTS_TABLE = "acris_documents"
PARTIES_TABLE = "acris_parties"
VALUATION_TABLE = "dof_property_valuation"

# Result limits (typically 2-6 parties per document)
MAX_DOCUMENTS_PER_BBL = 500
MAX_PARTIES_PER_QUERY = 5000

# Class code descriptions (CLASS CODE DESCRIPTION column of the control code table)
CLASS_DEED = "DEEDS AND OTHER CONVEYANCES"
CLASS_MORTGAGE = "MORTGAGES & INSTRUMENTS"
CLASS_UCC_LIEN = "UCC AND FEDERAL LIENS"
CLASS_OTHER = "OTHER DOCUMENTS"

# Party role codes (party_party_type)
ROLE_PARTY1 = "1"
ROLE_PARTY2 = "2"

# Labels
UNKNOWN_PARTY = "Unknown"
DEFAULT_ROLE_LABEL = "Party"
UNMAPPED_PARTY1_LABEL = "Party 1"
UNMAPPED_PARTY2_LABEL = "Party 2"

# Bundled control code table (subset of the ACRIS Document Control Codes dataset)
CONTROL_CODES_FILE = Path(__file__).parent / "acris_control_codes.json"
