from pydantic import BaseModel
from typing import List, Optional
from bs4 import BeautifulSoup


class EmailAddress(BaseModel):
    address: str
    displayName: Optional[str] = None


class EmailRecipients(BaseModel):
    to: List[EmailAddress]
    bcc: List[EmailAddress] = []

    def getFirst(self):
        if self.to:
            return self.to[0].address
        return None


class EmailContent(BaseModel):
    subject: str
    plainText: str
    html: Optional[str] = None

    @classmethod
    def from_html(cls, subject: str, html: str) -> "EmailContent":
        """HTML本文からプレーンテキストを生成してEmailContentを作る"""
        soup = BeautifulSoup(html, 'html.parser')
        for tag in soup(['style', 'script']):
            tag.decompose()
        text = "\n".join(line.strip() for line in soup.get_text().splitlines() if line.strip())
        return cls(subject=subject, plainText=text, html=html)

    @classmethod
    def payment_confirmation(
            cls,
            name: str,
            order_number: str,
            amount: str,
            currency: str,
            payment_id: str,
            company_name: str = "Nirchal",
        ) -> "EmailContent":
        html = f"""
<html>
<head>
  <meta charset="UTF-8">
  <style>
    body {{ font-family: 'Helvetica Neue', Arial, sans-serif; color: #333; line-height: 1.6; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .summary {{ background-color: #fff7e6; padding: 15px; border-left: 4px solid #f59e0b; margin: 15px 0; }}
    .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #eee; font-size: 12px; color: #666; }}
  </style>
</head>
<body>
  <div class="container">
    <h2>Thank you for your order, {name}!</h2>
    <p>We have received your payment. Your order is now being prepared.</p>
    <div class="summary">
      <p><strong>Order number:</strong> {order_number}</p>
      <p><strong>Amount paid:</strong> {currency} {amount}</p>
      <p><strong>Payment reference:</strong> {payment_id}</p>
    </div>
    <p>We will send you another email when your order ships.</p>
    <div class="footer">
      <p>{company_name}</p>
      <p>This is an automated message. Please do not reply to this email.</p>
    </div>
  </div>
</body>
</html>
"""
        return cls.from_html(f"[{company_name}] Payment received for order {order_number}", html)


class EmailRequest(BaseModel):
    senderAddress: str
    recipients: EmailRecipients
    content: EmailContent


class EmailResponse(BaseModel):
    id: str
    status: str
    error: Optional[str] = None
