
from fuku.bootstrap.components import Components
from fuku.config import Settings


def get_components(
        env: str = 'development',
        settings: Settings | None = None
) -> Components:
    return Components(env, settings)
