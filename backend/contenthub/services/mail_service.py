"""トランザクションメール送信 (認証コード)"""
import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from contenthub.core.config import settings
from contenthub.core.logging import get_logger

logger = get_logger(__name__)

# テンプレートエンジン
template_dir = Path(__file__).parent.parent / "templates" / "email"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)


def send_verify_code_email(to_email: str, code: str, ttl_minutes: int = 10) -> bool:
    """ログイン用認証コード送信"""
    try:
        resend.api_key = settings.RESEND_API_KEY
        template = jinja_env.get_template("verify_code.html")
        html = template.render(code=code, ttl_minutes=ttl_minutes, site_name=settings.SITE_NAME)

        resend.Emails.send({
            "from": settings.RESEND_FROM_EMAIL,
            "to": [to_email],
            "subject": f"【{settings.SITE_NAME}】ログイン認証コード",
            "html": html,
        })
        logger.info(f"認証コードメール送信: {to_email}")
        return True
    except Exception as e:
        logger.error(f"認証コードメール送信失敗: {to_email} - {e}")
        return False
