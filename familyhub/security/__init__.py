from familyhub.security.csrf import (
    CSRFCheck,
    CSRFProtector,
    get_csrf_protector,
    mask_token,
    set_csrf_protector,
)
from familyhub.security.token_store import (
    CSRFTokenRecord,
    DatabaseTokenStore,
    FallbackTokenStore,
    MemoryTokenStore,
    TokenStore,
    TokenStoreError,
)
