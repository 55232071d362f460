import warnings

warnings.filterwarnings("ignore", category=DeprecationWarning, module="logfire.*")

from tests.fixtures.live_request_fixtures import *  # noqa: E402, F403
from tests.fixtures.postgres_fixtures import *  # noqa: E402, F403
