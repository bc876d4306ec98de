# OpenSearch index template for event indices

from typing import Any, Dict

from ..pipeline import PIPELINE_NAME
from ..schema.analysis import ANALYSIS_SETTINGS


def event_index_template(schema, index_prefix="events", pipeline=PIPELINE_NAME, shards=1, replicas=0) -> Dict[str, Any]:
	"""Return the composable index template covering every daily event index."""
	return {
		"index_patterns": [f"{index_prefix}-*"],
		"template": {
			"settings": {
				"number_of_shards": shards,
				"number_of_replicas": replicas,
				"index.default_pipeline": pipeline,
				"analysis": ANALYSIS_SETTINGS,
			},
			"mappings": schema.mapping(),
		},
	}
