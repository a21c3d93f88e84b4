"""Route inbound mail to chat topics and topic replies back to mail."""

from opentelemetry.trace import Status, StatusCode

from topic_bridge.chat.protocol import ChatPlatform
from topic_bridge.errors import NoReadableBodyError, ThreadNotFoundError, TransportError
from topic_bridge.mail.body import extract_body
from topic_bridge.mail.mapping import build_reply_subject
from topic_bridge.mail.protocol import MailSender
from topic_bridge.models.chat import ChatUpdate
from topic_bridge.models.mail import InboundMail
from topic_bridge.models.thread import ThreadKind
from topic_bridge.reconciler import ThreadReconciler
from topic_bridge.utils.body_sanitizer import format_inbound_post
from topic_bridge.utils.logger import get_logger
from topic_bridge.utils.tracing import get_tracer

logger = get_logger("topic_bridge.bridge")


def reply_signature(sender_name: str) -> str:
    return f"Sent from {sender_name}"


class TopicBridge:
    """Both directions of the bridge. Each call handles one event and never raises."""

    def __init__(
        self,
        reconciler: ThreadReconciler,
        chat: ChatPlatform,
        sender: MailSender,
        space_id: int,
    ):
        self._reconciler = reconciler
        self._chat = chat
        self._sender = sender
        self._space_id = space_id

    def handle_inbound_mail(self, mail: InboundMail) -> bool:
        """Post one inbound mail into its correspondent's topic. Returns True when posted."""
        tracer = get_tracer()
        log = logger.bind(seq=mail.seq, sender=mail.sender_address, message_id=mail.message_id)
        with tracer.start_as_current_span(
            "handle_inbound_mail",
            attributes={"mail.seq": mail.seq, "mail.sender": mail.sender_address},
        ) as span:
            if not mail.sender_address:
                log.warning("bridge.inbound.no_sender")
                return False
            try:
                thread_handle = self._reconciler.resolve_or_create(
                    ThreadKind.EMAIL,
                    mail.sender_address,
                    mail.display_name,
                    subject=mail.subject,
                    message_ref=mail.message_id,
                )
                span.set_attribute("thread.handle", thread_handle)
                self._reconciler.refresh_metadata(thread_handle, mail.subject, mail.message_id)
                body = extract_body(mail)
                self._chat.post_message(self._space_id, thread_handle, format_inbound_post(mail.subject, body))
            except NoReadableBodyError as e:
                log.warning("bridge.inbound.no_readable_body", error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return False
            except TransportError as e:
                log.warning("bridge.inbound.transport_error", error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return False
            except Exception as e:
                log.exception("bridge.inbound.error", error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                return False

        log.info("bridge.inbound.posted", thread_handle=thread_handle)
        return True

    def _is_relevant(self, update: ChatUpdate) -> bool:
        return (
            update.space_id == self._space_id
            and update.is_topic_message
            and update.thread_handle is not None
            and not update.sender_is_bot
            and bool(update.text)
        )

    def handle_chat_update(self, update: ChatUpdate) -> bool:
        """Send a topic message back to the correspondent as mail. Returns True when mail was sent."""
        if not self._is_relevant(update):
            return False

        tracer = get_tracer()
        log = logger.bind(update_id=update.update_id, thread_handle=update.thread_handle)
        with tracer.start_as_current_span(
            "handle_chat_update",
            attributes={"chat.update_id": update.update_id, "thread.handle": update.thread_handle},
        ) as span:
            try:
                thread = self._reconciler.resolve_by_handle(update.thread_handle)
            except ThreadNotFoundError:
                log.debug("bridge.outbound.unmanaged_thread")
                return False
            except Exception as e:
                log.exception("bridge.outbound.lookup_error", error=str(e))
                span.record_exception(e)
                return False

            if thread.kind != ThreadKind.EMAIL.value:
                log.info("bridge.outbound.unsupported_kind", kind=thread.kind)
                return False

            body = f"{update.text}\n\n{reply_signature(update.sender_display_name)}"
            subject = build_reply_subject(thread.last_subject or "")
            try:
                if thread.last_message_ref:
                    self._sender.reply(thread.target, subject, thread.last_message_ref, body)
                else:
                    self._sender.send(thread.target, subject, body)
            except TransportError as e:
                log.warning("bridge.outbound.send_failed", to=thread.target, error=str(e))
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return False

        log.info("bridge.outbound.mail_sent", to=thread.target, subject=subject)
        return True
