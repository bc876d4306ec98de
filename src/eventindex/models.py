# Well-known keys of the event document and its data bags


class KnownDataKeys:
	"""Keys of the event's top-level data bag."""
	VERSION = "@version"
	LEVEL = "@level"
	SUBMISSION_METHOD = "@submission_method"
	LOCATION = "@location"
	REQUEST_INFO = "@request"
	ERROR = "@error"
	SIMPLE_ERROR = "@simple_error"
	ENVIRONMENT_INFO = "@environment"
	USER_DESCRIPTION = "@user_description"
	USER_INFO = "@user"


class RequestDataKeys:
	"""Keys of the request info's own data bag."""
	BROWSER = "@browser"
	BROWSER_VERSION = "@browser_version"
	BROWSER_MAJOR_VERSION = "@browser_major_version"
	DEVICE = "@device"
	OS = "@os"
	OS_VERSION = "@os_version"
	OS_MAJOR_VERSION = "@os_major_version"
	IS_BOT = "@is_bot"


class ErrorDataKeys:
	TARGET_INFO = "@target"


# Error-chain node attributes
NODE_TYPE = "type"
NODE_MESSAGE = "message"
NODE_CODE = "code"
NODE_INNER = "inner"

DATA = "data"
ERROR = "error"
