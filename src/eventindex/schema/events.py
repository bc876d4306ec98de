# Event index schema: core fields, data bag fields and derived fields

from ..models import (
	DATA,
	ERROR,
	ErrorDataKeys,
	KnownDataKeys,
	RequestDataKeys,
)
from .analysis import (
	COMMA_WHITESPACE_ANALYZER,
	EMAIL_ANALYZER,
	TYPENAME_ANALYZER,
	VERSION_INDEX_ANALYZER,
	VERSION_SEARCH_ANALYZER,
	WHITESPACE_LOWERCASE_ANALYZER,
)
from .fields import BOOLEAN, DATE, DOUBLE, GEO_POINT, INTEGER, KEYWORD, TEXT
from .registry import FieldRegistry, Schema


class Alias:
	"""Short query-facing names for event fields."""
	CREATED_UTC = "created"
	ORGANIZATION_ID = "organization"
	PROJECT_ID = "project"
	STACK_ID = "stack"
	ID = "id"
	REFERENCE_ID = "reference"
	DATE = "date"
	TYPE = "type"
	SOURCE = "source"
	MESSAGE = "message"
	TAGS = "tag"
	GEO = "geo"
	VALUE = "value"
	COUNT = "count"
	IS_FIRST_OCCURRENCE = "first"
	IS_FIXED = "fixed"
	IS_HIDDEN = "hidden"
	IDX = "idx"

	VERSION = "version"
	LEVEL = "level"
	SUBMISSION_METHOD = "submission"

	IP_ADDRESS = "ip"

	REQUEST_USER_AGENT = "useragent"
	REQUEST_PATH = "path"

	BROWSER = "browser"
	BROWSER_VERSION = "browser.version"
	BROWSER_MAJOR_VERSION = "browser.major"
	REQUEST_IS_BOT = "bot"

	DEVICE = "device"

	OPERATING_SYSTEM = "os"
	OPERATING_SYSTEM_VERSION = "os.version"
	OPERATING_SYSTEM_MAJOR_VERSION = "os.major"

	MACHINE_NAME = "machine"
	MACHINE_ARCHITECTURE = "architecture"

	USER = "user"
	USER_NAME = "user.name"
	USER_EMAIL = "user.email"
	USER_DESCRIPTION = "user.description"

	LOCATION_COUNTRY = "country"
	LOCATION_LEVEL1 = "level1"
	LOCATION_LEVEL2 = "level2"
	LOCATION_LOCALITY = "locality"

	ERROR_CODE = "error.code"
	ERROR_TYPE = "error.type"
	ERROR_MESSAGE = "error.message"
	ERROR_TARGET_TYPE = "error.targettype"
	ERROR_TARGET_METHOD = "error.targetmethod"


def _data(*keys):
	return ".".join((DATA,) + keys)


def add_core_fields(registry: FieldRegistry):
	registry.declare("created_utc", DATE, alias=Alias.CREATED_UTC)
	registry.declare("id", KEYWORD, alias=Alias.ID, include_in_all=True)
	registry.declare("organization_id", KEYWORD, alias=Alias.ORGANIZATION_ID)
	registry.declare("project_id", KEYWORD, alias=Alias.PROJECT_ID)
	registry.declare("stack_id", KEYWORD, alias=Alias.STACK_ID)
	registry.declare("reference_id", KEYWORD, alias=Alias.REFERENCE_ID)
	registry.declare("type", KEYWORD, alias=Alias.TYPE)
	registry.declare("source", TEXT, alias=Alias.SOURCE, include_in_all=True, keyword=True)
	registry.declare("date", DATE, alias=Alias.DATE)
	registry.declare("message", TEXT, alias=Alias.MESSAGE, include_in_all=True)
	registry.declare("tags", TEXT, alias=Alias.TAGS, include_in_all=True, boost=1.2, keyword=True)
	registry.declare("geo", GEO_POINT, alias=Alias.GEO)
	registry.declare("value", DOUBLE, alias=Alias.VALUE)
	registry.declare("count", INTEGER, alias=Alias.COUNT)
	registry.declare("is_first_occurrence", BOOLEAN, alias=Alias.IS_FIRST_OCCURRENCE)
	registry.declare("is_fixed", BOOLEAN, alias=Alias.IS_FIXED)
	registry.declare("is_hidden", BOOLEAN, alias=Alias.IS_HIDDEN)
	registry.object("idx", dynamic=True, alias=Alias.IDX)
	# Reference ids stored under idx as "<name>-r" are matched exactly
	registry.dynamic_template("idx_reference", match="*-r", mapping={"type": KEYWORD, "ignore_above": 256})


def add_data_fields(registry: FieldRegistry):
	registry.declare(
		_data(KnownDataKeys.VERSION), TEXT, alias=Alias.VERSION, keyword=True,
		analyzer=VERSION_INDEX_ANALYZER, search_analyzer=VERSION_SEARCH_ANALYZER,
	)
	registry.declare(_data(KnownDataKeys.LEVEL), TEXT, alias=Alias.LEVEL, keyword=True)
	registry.declare(_data(KnownDataKeys.SUBMISSION_METHOD), TEXT, alias=Alias.SUBMISSION_METHOD, keyword=True)

	location = KnownDataKeys.LOCATION
	registry.declare(_data(location, "country"), KEYWORD, alias=Alias.LOCATION_COUNTRY)
	registry.declare(_data(location, "level1"), KEYWORD, alias=Alias.LOCATION_LEVEL1)
	registry.declare(_data(location, "level2"), KEYWORD, alias=Alias.LOCATION_LEVEL2)
	registry.declare(_data(location, "locality"), KEYWORD, alias=Alias.LOCATION_LOCALITY)

	request = KnownDataKeys.REQUEST_INFO
	registry.declare(_data(request, "user_agent"), TEXT, alias=Alias.REQUEST_USER_AGENT, keyword=True)
	registry.declare(_data(request, "path"), TEXT, alias=Alias.REQUEST_PATH, include_in_all=True, keyword=True)
	registry.declare(_data(request, DATA, RequestDataKeys.BROWSER), TEXT, alias=Alias.BROWSER, keyword=True)
	registry.declare(
		_data(request, DATA, RequestDataKeys.BROWSER_VERSION), TEXT, alias=Alias.BROWSER_VERSION, keyword=True,
	)
	registry.declare(_data(request, DATA, RequestDataKeys.BROWSER_MAJOR_VERSION), TEXT, alias=Alias.BROWSER_MAJOR_VERSION)
	registry.declare(_data(request, DATA, RequestDataKeys.DEVICE), TEXT, alias=Alias.DEVICE, keyword=True)
	registry.declare(
		_data(request, DATA, RequestDataKeys.OS_VERSION), TEXT, alias=Alias.OPERATING_SYSTEM_VERSION, keyword=True,
	)
	registry.declare(_data(request, DATA, RequestDataKeys.OS_MAJOR_VERSION), TEXT, alias=Alias.OPERATING_SYSTEM_MAJOR_VERSION)
	registry.declare(_data(request, DATA, RequestDataKeys.IS_BOT), BOOLEAN, alias=Alias.REQUEST_IS_BOT)

	environment = KnownDataKeys.ENVIRONMENT_INFO
	registry.declare(
		_data(environment, "machine_name"), TEXT, alias=Alias.MACHINE_NAME,
		include_in_all=True, boost=1.1, keyword=True,
	)
	registry.declare(_data(environment, "architecture"), KEYWORD, alias=Alias.MACHINE_ARCHITECTURE)

	description = KnownDataKeys.USER_DESCRIPTION
	registry.declare(_data(description, "description"), TEXT, alias=Alias.USER_DESCRIPTION, include_in_all=True)
	registry.declare(
		_data(description, "email_address"), TEXT, alias=Alias.USER_EMAIL,
		analyzer=EMAIL_ANALYZER, search_analyzer="simple", include_in_all=True, boost=1.1, keyword=True,
	)

	user = KnownDataKeys.USER_INFO
	registry.declare(
		_data(user, "identity"), TEXT, alias=Alias.USER,
		analyzer=EMAIL_ANALYZER, search_analyzer=WHITESPACE_LOWERCASE_ANALYZER,
		include_in_all=True, boost=1.1, keyword=True,
	)
	registry.declare(_data(user, "name"), TEXT, alias=Alias.USER_NAME, include_in_all=True, keyword=True)


def add_error_fields(registry: FieldRegistry):
	"""Fields filled in by the error flattening pipeline before indexing."""
	registry.object(ERROR)
	registry.declare(Alias.ERROR_CODE, KEYWORD, alias=Alias.ERROR_CODE, include_in_all=True, boost=1.1)
	registry.declare(Alias.ERROR_MESSAGE, TEXT, alias=Alias.ERROR_MESSAGE, include_in_all=True, keyword=True)
	registry.declare(
		Alias.ERROR_TYPE, TEXT, alias=Alias.ERROR_TYPE,
		analyzer=TYPENAME_ANALYZER, search_analyzer=WHITESPACE_LOWERCASE_ANALYZER,
		include_in_all=True, boost=1.1, keyword=True,
	)


def add_derived_fields(registry: FieldRegistry):
	request = KnownDataKeys.REQUEST_INFO
	environment = KnownDataKeys.ENVIRONMENT_INFO
	registry.project(
		[_data(request, "client_ip_address"), _data(environment, "ip_address")],
		Alias.IP_ADDRESS,
		analyzer=COMMA_WHITESPACE_ANALYZER, include_in_all=True,
	)
	registry.project(
		[_data(request, DATA, RequestDataKeys.OS), _data(environment, "os_name")],
		Alias.OPERATING_SYSTEM,
		keyword=True,
	)
	target = ErrorDataKeys.TARGET_INFO
	registry.project(
		[
			_data(KnownDataKeys.ERROR, DATA, target, "ExceptionType"),
			_data(KnownDataKeys.SIMPLE_ERROR, DATA, target, "ExceptionType"),
		],
		Alias.ERROR_TARGET_TYPE,
		analyzer=TYPENAME_ANALYZER, search_analyzer=WHITESPACE_LOWERCASE_ANALYZER,
		include_in_all=True, boost=1.2, keyword=True,
	)
	registry.project(
		[_data(KnownDataKeys.ERROR, DATA, target, "Method")],
		Alias.ERROR_TARGET_METHOD,
		analyzer=TYPENAME_ANALYZER, search_analyzer=WHITESPACE_LOWERCASE_ANALYZER,
		include_in_all=True, boost=1.2, keyword=True,
	)


def event_registry() -> FieldRegistry:
	"""Return a registry holding every event field declaration, not yet validated."""
	return (
		FieldRegistry()
		.extend(add_core_fields)
		.extend(add_data_fields)
		.extend(add_error_fields)
		.extend(add_derived_fields)
	)


def build_event_schema() -> Schema:
	return event_registry().build()
