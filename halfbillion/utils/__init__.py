from .celebration import announce, banner_line, celebrate

__all__ = ['announce', 'banner_line', 'celebrate']
