"""
courseregistry – course types, courses, offerings and student registrations.

Typical use:

    from courseregistry.registry import Registry
    from courseregistry.storage import JsonFileStorage

    registry = Registry(JsonFileStorage("data/store"))
"""
