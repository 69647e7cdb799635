# for reference:
#   https://json-schema.org/understanding-json-schema/reference/object

schema_url = "http://json-schema.org/draft-07/schema"

platformProperties = {
    "dockerfile": {"type": "string", "minLength": 1},
    "osType": {"type": "string"},
    "osVersion": {"type": "string"},
    "architecture": {"type": "string"},
    "variant": {"type": "string"},
    "simpleTags": {"type": "array", "items": {"type": "string"}},
    "digest": {"type": "string"},
}

imageProperties = {
    "productVersion": {"type": "string"},
    "manifest": {"type": ["object", "null"]},
    "platforms": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["dockerfile", "osType", "osVersion", "architecture"],
            "properties": platformProperties,
            "additionalProperties": True,
        },
    },
}

repoProperties = {
    "repo": {"type": "string", "minLength": 1},
    "images": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["platforms"],
            "properties": imageProperties,
            "additionalProperties": True,
        },
    },
}


image_info = {
    "$schema": schema_url,
    "title": "Image Info Schema",
    "type": "object",
    "required": ["repos"],
    "properties": {
        "repos": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["repo"],
                "properties": repoProperties,
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}

manifestPlatformProperties = {
    "dockerfile": {"type": "string", "minLength": 1},
    "os": {"type": "string"},
    "osVersion": {"type": "string"},
    "architecture": {"type": "string"},
    "variant": {"type": ["string", "null"]},
    "tags": {"type": ["array", "object"]},
}

manifest = {
    "$schema": schema_url,
    "title": "Manifest Schema",
    "type": "object",
    "required": ["repos"],
    "properties": {
        "registry": {"type": "string"},
        "repos": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "images"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "images": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["platforms"],
                            "properties": {
                                "platforms": {
                                    "type": "array",
                                    "items": {
                                        "type": "object",
                                        "required": ["dockerfile", "os"],
                                        "properties": manifestPlatformProperties,
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    },
    "additionalProperties": True,
}
