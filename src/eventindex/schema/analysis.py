# Custom analyzers referenced by the event schema

WHITESPACE_LOWERCASE_ANALYZER = "whitespace_lower"
TYPENAME_ANALYZER = "typename"
EMAIL_ANALYZER = "email"
VERSION_INDEX_ANALYZER = "version_index"
VERSION_SEARCH_ANALYZER = "version_search"
COMMA_WHITESPACE_ANALYZER = "comma_whitespace"

ANALYSIS_SETTINGS = {
	"tokenizer": {
		"comma_whitespace": {"type": "pattern", "pattern": "[,\\s]+"},
		# "1.2.3" indexes as "1", "1.2", "1.2.3" so a prefix version matches
		"version_hierarchy": {"type": "path_hierarchy", "delimiter": "."},
	},
	"filter": {
		"email": {
			"type": "pattern_capture",
			"patterns": ["(\\w+)", "(\\p{L}+)", "(\\d+)", "@(.+)", "([^@]+)"],
		},
		"typename": {
			"type": "pattern_capture",
			"patterns": ["\\.(\\w+)", "([^\\(\\)]+)"],
		},
	},
	"analyzer": {
		WHITESPACE_LOWERCASE_ANALYZER: {
			"type": "custom",
			"tokenizer": "whitespace",
			"filter": ["lowercase"],
		},
		TYPENAME_ANALYZER: {
			"type": "custom",
			"tokenizer": "whitespace",
			"filter": ["typename", "lowercase", "unique"],
		},
		EMAIL_ANALYZER: {
			"type": "custom",
			"tokenizer": "keyword",
			"filter": ["email", "lowercase", "unique"],
		},
		VERSION_INDEX_ANALYZER: {
			"type": "custom",
			"tokenizer": "version_hierarchy",
			"filter": ["lowercase"],
		},
		VERSION_SEARCH_ANALYZER: {
			"type": "custom",
			"tokenizer": "keyword",
			"filter": ["lowercase"],
		},
		COMMA_WHITESPACE_ANALYZER: {
			"type": "custom",
			"tokenizer": "comma_whitespace",
			"filter": ["lowercase"],
		},
	},
}
