"""Pipeline modules: orchestration layer for blogwriter.

  blog: topic (or nothing) -> brainstorm -> draft -> review -> formatted payload

Pipeline modules import domain logic via public APIs:
  - ``from blogwriter.blog import ...`` (not ``blogwriter.blog.services``)
  - ``from blogwriter.integrations.portfolio import ...`` for the blog API
"""

from blogwriter.pipeline.blog import BlogPipeline, ProgressListener, SummarySource, generate_blog

__all__ = ["BlogPipeline", "ProgressListener", "SummarySource", "generate_blog"]
