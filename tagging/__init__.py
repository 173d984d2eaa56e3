from tagging.keywords import tag_article

__all__ = ["tag_article"]
