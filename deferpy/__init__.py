from .errors import UsageError, PatchTypeError
from .stack import ActionStack
from .host import HostBinding, bind
from .scope import Scope, new, EXPLICIT, HOSTED
from .config import Settings, load_settings, get_settings
from .testcase import ScopedTestCase
