"""Version information for Concord."""

# Semantic versioning: MAJOR.MINOR.PATCH
# MAJOR: Breaking changes to API or callback payloads
# MINOR: New features, backward compatible
# PATCH: Bug fixes, backward compatible

__version__ = "0.2.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.2.0 - Cancellable delay policy and layered configuration
#         - Simulated computation delay is an injectable policy (constant/random)
#         - Sync endpoint honours an optional deadline (504 on expiry)
#         - Config composed from defaults, YAML and environment variables
#         - Non-finite analysis percentages treated as missing data
# 0.1.0 - Initial release
#         - Async and sync coincidence calculation endpoints
#         - Callback delivery to the backend
#         - Health endpoint
