"""Shared constants for paramigrate.

This module contains constants that are used across multiple modules
to avoid duplication and ensure consistency.
"""

# =============================================================================
# Target SDK
# =============================================================================

# Package that replaces every source provider's React package
TARGET_PACKAGE = "@getpara/react-sdk"

# Package that exports the Environment enum
TARGET_CORE_PACKAGE = "@getpara/core-sdk"

# Stylesheet that must be imported once in the application entry point
TARGET_STYLESHEET = "@getpara/react-sdk/styles.css"

# Version spec written when the target dependency is added
TARGET_VERSION = "latest"

# npm scopes published by the target SDK
TARGET_SCOPES = ("@getpara/", "@para-wallet/")

TARGET_PROVIDER_COMPONENT = "ParaProvider"
TARGET_MODAL_COMPONENT = "ParaModal"

# Environment enum members, keyed by the raw string they replace
ENVIRONMENT_ENUM = {
    "development": "Environment.DEVELOPMENT",
    "production": "Environment.PRODUCTION",
}

# =============================================================================
# Strategy names
# =============================================================================

STRATEGY_PRIVY = "privy-to-para"
STRATEGY_REOWN = "reown-to-para"
STRATEGY_WEB3MODAL = "web3modal-to-para"

# Detection order when a project carries traces of several providers
DEFAULT_STRATEGY_PRIORITY = (STRATEGY_PRIVY, STRATEGY_REOWN, STRATEGY_WEB3MODAL)

# =============================================================================
# Source-provider fingerprints
# =============================================================================

# Every substring that marks a dependency as belonging to a wallet
# provider we migrate away from.  "walletconnect" only counts as
# migratable content; no strategy owns it.
SOURCE_DEPENDENCY_FINGERPRINTS = ("privy", "reown", "appkit", "web3modal", "walletconnect")

# Substrings whose presence after migration means cleanup is incomplete
LEFTOVER_DEPENDENCY_FINGERPRINTS = ("privy", "reown", "appkit", "web3modal")

# =============================================================================
# Validation issue codes
# =============================================================================

CODE_NO_MIGRATABLE_CONTENT = "NO_MIGRATABLE_CONTENT"
CODE_NO_ENTRY_POINTS = "NO_ENTRY_POINTS"
CODE_MISSING_PARA_MODAL = "MISSING_PARA_MODAL"
CODE_MISSING_PARA_CSS = "MISSING_PARA_CSS"
CODE_STRING_ENVIRONMENT = "STRING_ENVIRONMENT"
CODE_OLD_DEPENDENCIES_PRESENT = "OLD_DEPENDENCIES_PRESENT"
CODE_MISSING_PARA_DEPENDENCY = "MISSING_PARA_DEPENDENCY"
CODE_OLD_IMPORT_PRESENT = "OLD_IMPORT_PRESENT"
CODE_NO_PARA_PROVIDER = "NO_PARA_PROVIDER"
CODE_OPERATION_FAILED = "OPERATION_FAILED"
CODE_ROLLBACK_FAILED = "ROLLBACK_FAILED"

# =============================================================================
# Migration success score weights (sum to 100)
# =============================================================================

SCORE_TARGET_DEPENDENCY = 15
SCORE_NO_SOURCE_DEPENDENCY = 15
SCORE_TARGET_IMPORT = 15
SCORE_NO_SOURCE_IMPORT = 10
SCORE_TARGET_PROVIDER = 15
SCORE_MODAL_IMPORT = 10
SCORE_TARGET_STYLESHEET = 10
SCORE_TARGET_HOOK = 10
