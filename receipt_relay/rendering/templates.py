"""Receipt layouts. Values are substituted with ``string.Template``."""

from __future__ import annotations

from string import Template

RECEIPT_WIDTH = 1000
RECEIPT_HEIGHT = 392

RECEIPT_HTML = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Transfer Receipt</title>
<style>
* {margin:0;padding:0;box-sizing:border-box;}
body {font-family:-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;background:#fff;}
.receipt-container {width:1000px;height:392px;background:#fff;border:1px solid #e8e8e8;border-radius:8px;position:relative;overflow:hidden;}
.receipt-header {height:88px;display:flex;align-items:center;justify-content:space-between;padding:0 32px 0 31px;border-bottom:1px solid #f0f0f0;}
.receipt-left {display:flex;align-items:center;gap:20px;height:100%;}
.icon-container {width:32px;height:60px;display:flex;flex-direction:column;align-items:center;justify-content:center;gap:8px;}
.checkbox {width:20px;height:20px;border:2px solid #dc2626;border-radius:2px;}
.arrows {display:flex;flex-direction:column;gap:1px;}
.arrow-right, .arrow-left {width:24px;height:2px;background:#6b7280;position:relative;}
.arrow-right::after {content:'';position:absolute;right:-4px;top:-2px;border-left:4px solid #6b7280;border-top:3px solid transparent;border-bottom:3px solid transparent;}
.arrow-left::before {content:'';position:absolute;left:-4px;top:-2px;border-right:4px solid #6b7280;border-top:3px solid transparent;border-bottom:3px solid transparent;}
.recipient-info {display:flex;flex-direction:column;gap:4px;}
.recipient-name {font-size:20px;font-weight:600;color:#000;line-height:24px;}
.transaction-id {font-size:12px;color:#6b7280;line-height:16px;}
.receipt-right {display:flex;flex-direction:column;align-items:flex-end;gap:4px;}
.payment-type {font-size:12px;color:#dc2626;font-weight:600;text-transform:uppercase;letter-spacing:0.5px;line-height:16px;}
.amount {font-size:26px;font-weight:700;color:#000;line-height:32px;}
.date-section {height:36px;display:flex;align-items:center;padding:0 32px 0 31px;}
.date {font-size:16px;font-weight:600;color:#000;line-height:20px;}
.details-section {height:268px;padding:8px 32px 0 31px;}
.detail-row {height:40px;display:flex;align-items:center;border-bottom:1px solid #f5f5f5;position:relative;}
.detail-row:last-of-type {border-bottom:none;}
.detail-label {font-size:12px;color:#9ca3af;text-transform:uppercase;font-weight:500;letter-spacing:0.8px;position:absolute;left:16px;}
.detail-value {font-size:14px;color:#000;font-weight:600;position:absolute;left:230px;}
</style>
</head>
<body>
<div class="receipt-container">
  <div class="receipt-header">
    <div class="receipt-left">
      <div class="icon-container">
        <div class="checkbox"></div>
        <div class="arrows"><div class="arrow-right"></div><div class="arrow-left"></div></div>
      </div>
      <div class="recipient-info">
        <h2 class="recipient-name">$recipient_name</h2>
        <div class="transaction-id">UTR : $utr</div>
      </div>
    </div>
    <div class="receipt-right">
      <div class="payment-type">$payment_type</div>
      <div class="amount">$amount</div>
    </div>
  </div>
  <div class="date-section"><div class="date">$date</div></div>
  <div class="details-section">
    <div class="detail-row"><span class="detail-label">PAYMENT TYPE</span><span class="detail-value">$payment_type</span></div>
    <div class="detail-row"><span class="detail-label">TRANSACTION ID</span><span class="detail-value">$transaction_id</span></div>
    <div class="detail-row"><span class="detail-label">TO ACCOUNT</span><span class="detail-value">$to_account</span></div>
    <div class="detail-row"><span class="detail-label">IFSC</span><span class="detail-value">$ifsc</span></div>
    <div class="detail-row"><span class="detail-label">COUNTER PARTY NAME</span><span class="detail-value">$recipient_name</span></div>
  </div>
</div>
</body>
</html>
""")

RECEIPT_SVG = Template("""<svg xmlns="http://www.w3.org/2000/svg" width="1000" height="392" viewBox="0 0 1000 392">
<style>
text {font-family:-apple-system, 'Segoe UI', Roboto, sans-serif;}
.name {font-size:20px;font-weight:600;fill:#000;}
.muted {font-size:12px;fill:#6b7280;}
.ptype {font-size:12px;font-weight:600;fill:#dc2626;text-transform:uppercase;letter-spacing:0.5px;}
.amount {font-size:26px;font-weight:700;fill:#000;}
.date {font-size:16px;font-weight:600;fill:#000;}
.label {font-size:12px;font-weight:500;fill:#9ca3af;letter-spacing:0.8px;}
.value {font-size:14px;font-weight:600;fill:#000;}
</style>
<rect x="0.5" y="0.5" width="999" height="391" rx="8" fill="#fff" stroke="#e8e8e8"/>
<line x1="0" y1="88" x2="1000" y2="88" stroke="#f0f0f0"/>
<rect x="37" y="22" width="20" height="20" rx="2" fill="none" stroke="#dc2626" stroke-width="2"/>
<line x1="35" y1="52" x2="59" y2="52" stroke="#6b7280" stroke-width="2"/>
<line x1="35" y1="56" x2="59" y2="56" stroke="#6b7280" stroke-width="2"/>
<text class="name" x="83" y="44">$recipient_name</text>
<text class="muted" x="83" y="64">UTR : $utr</text>
<text class="ptype" x="968" y="38" text-anchor="end">$payment_type</text>
<text class="amount" x="968" y="68" text-anchor="end">$amount</text>
<text class="date" x="31" y="112">$date</text>
<text class="label" x="47" y="158">PAYMENT TYPE</text><text class="value" x="261" y="158">$payment_type</text>
<text class="label" x="47" y="198">TRANSACTION ID</text><text class="value" x="261" y="198">$transaction_id</text>
<text class="label" x="47" y="238">TO ACCOUNT</text><text class="value" x="261" y="238">$to_account</text>
<text class="label" x="47" y="278">IFSC</text><text class="value" x="261" y="278">$ifsc</text>
<text class="label" x="47" y="318">COUNTER PARTY NAME</text><text class="value" x="261" y="318">$recipient_name</text>
</svg>
""")
