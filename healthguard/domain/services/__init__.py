from .probe_filters import all_of, exclude_tags, has_all_tags, has_any_tag, named

__all__ = ["all_of", "exclude_tags", "has_all_tags", "has_any_tag", "named"]
