class ShahalaError(Exception):
    """Базовая ошибка сервера."""


class StorageError(ShahalaError):
    """
    Ошибка доступа к БД: нет соединения, запрос отклонён
    или строку не удалось разобрать в запись.
    """


class RenderError(ShahalaError):
    """
    Ошибка отрисовки: шаблон не найден, не разобран
    или упал во время выполнения.
    """
