"""Excepciones específicas del dominio utilizadas por el análisis de técnica.

Hay tres familias: fallos fatales de la ejecución (``PipelineError``), fallos
recuperables de un fotograma concreto (``FrameError``) y usos indebidos de la
máquina de estados de la sesión (``SessionStateError``)."""


class PipelineError(Exception):
    """Excepción base para fallos fatales en la *pipeline*."""


class VideoOpenError(PipelineError):
    """Se lanza cuando el vídeo no puede abrirse ni decodificarse en absoluto."""


class AnalysisCancelled(PipelineError):
    """Se lanza cuando el llamador cancela la ejecución entre fotogramas."""


class FrameError(Exception):
    """Excepción base para fallos de un único fotograma; nunca es fatal."""


class FrameDecodeError(FrameError):
    """El decodificador no pudo producir una imagen para el instante pedido."""


class PoseEstimationError(FrameError):
    """El estimador no encontró una pose en la imagen."""


class SessionStateError(Exception):
    """Base para peticiones incompatibles con el estado de la sesión."""


class PipelineBusy(SessionStateError):
    """Se pidió un análisis mientras otro seguía en curso en la misma sesión."""


class SessionFinished(SessionStateError):
    """La sesión ya terminó; cada análisis necesita una sesión nueva."""
