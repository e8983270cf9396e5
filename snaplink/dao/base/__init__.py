from snaplink.dao.base.link_base_dao import LinkBaseDAO, PutMode


__all__ = [
    'LinkBaseDAO',
    'PutMode',
]
