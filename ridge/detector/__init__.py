"""Architecture detection: boundaries, validation, metrics, explanations, recommendations, blast radius, traces and note links."""