from string import Template

APP_URL_DEFAULT = "https://code404.dev"

CREDENTIALS_SUBJECT = "Welcome to DevForge - Your Login Credentials"

CREDENTIALS_HTML = Template("""<!DOCTYPE html>
<html>
<head>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; border-radius: 10px 10px 0 0; text-align: center; }
    .content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
    .credentials-box { background: white; border: 2px solid #667eea; border-radius: 8px; padding: 20px; margin: 20px 0; }
    .credential-item { margin: 15px 0; padding: 10px; background: #f0f0f0; border-radius: 5px; }
    .credential-label { font-weight: bold; color: #667eea; display: block; margin-bottom: 5px; }
    .credential-value { font-size: 18px; font-family: 'Courier New', monospace; color: #333; }
    .button { display: inline-block; background: #667eea; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; margin: 20px 0; }
    .warning { background: #fff3cd; border-left: 4px solid #ffc107; padding: 15px; margin: 20px 0; border-radius: 4px; }
    .footer { text-align: center; color: #666; font-size: 12px; margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; }
  </style>
</head>
<body>
  <div class="header"><h1>Welcome to DevForge!</h1></div>
  <div class="content">
    <p>Hi <strong>$name</strong>,</p>
    <p>Congratulations! Your membership has been approved. We're excited to have you join our community of developers, builders, and innovators.</p>
    <div class="credentials-box">
      <h2 style="margin-top: 0; color: #667eea;">Your Login Credentials</h2>
      <div class="credential-item"><span class="credential-label">Username:</span><span class="credential-value">$username</span></div>
      <div class="credential-item"><span class="credential-label">Password:</span><span class="credential-value">$password</span></div>
    </div>
    <div style="text-align: center;"><a href="$app_url" class="button">Login to Dashboard &rarr;</a></div>
    <div class="warning"><strong>Security Note:</strong> Please keep your credentials secure and don't share them with anyone. We recommend changing your password after your first login.</div>
    <h3>What's Next?</h3>
    <ul>
      <li>Explore active projects and join teams</li>
      <li>RSVP to upcoming events and workshops</li>
      <li>Connect with fellow members</li>
      <li>Start building amazing things!</li>
    </ul>
    <p>Happy coding!</p>
    <p style="margin-top: 30px;">Best regards,<br><strong>DevForge Team</strong></p>
  </div>
  <div class="footer">
    <p>This is an automated email. Please do not reply to this message.</p>
    <p>&copy; $year DevForge. All rights reserved.</p>
  </div>
</body>
</html>
""")

CREDENTIALS_TEXT = Template("""Welcome to DevForge Dev Club!

Hi $name,

Congratulations! Your membership has been approved.

Your Login Credentials:
Username: $username
Password: $password

Login at: $app_url

Please keep your credentials secure and change your password after your first login.

Best regards,
DevForge Team
""")

REGISTRATION_SUBJECT = "DevForge Hackathon - Registration Received!"

REGISTRATION_HTML = Template("""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #e5e7eb; background-color: #000000; padding: 20px; }
    .container { max-width: 600px; margin: 0 auto; background: #0a0a0a; border-radius: 16px; overflow: hidden; border: 1px solid rgba(249, 115, 22, 0.2); }
    .header { background: linear-gradient(135deg, #f97316 0%, #ea580c 50%, #dc2626 100%); color: white; padding: 48px 32px; text-align: center; }
    .content { padding: 40px 32px; }
    .details-box { border-radius: 12px; padding: 24px; margin: 24px 0; border: 1px solid rgba(249, 115, 22, 0.3); border-left: 4px solid #f97316; }
    .warning-box { border: 3px solid #ef4444; border-radius: 12px; padding: 24px; margin: 28px 0; color: #fca5a5; }
    .footer { color: #6b7280; text-align: center; padding: 28px 32px; font-size: 13px; border-top: 1px solid rgba(249, 115, 22, 0.2); }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Registration Received!</h1>
      <p>DevForge Hackathon 2025</p>
    </div>
    <div class="content">
      <p>Hi <strong>$name</strong>,</p>
      <p>Thanks for registering for DevForge! Your registration is under review. Spots are limited and confirmations go out in order of review.</p>
      <div class="details-box">
        <h3>Your Registration</h3>
        <p>$details</p>
        <p><strong>Date:</strong> December 20, 2025, 7:00 AM IST</p>
        <p><strong>Venue:</strong> NST Campus</p>
      </div>
      <div class="warning-box">
        <p><strong>Before the event:</strong></p>
        <ul>
          <li>Watch your inbox for the final confirmation email</li>
          <li>Bring your laptop, charger and a valid college ID</li>
          <li>Enable notifications on the DevForge site for schedule reminders</li>
        </ul>
      </div>
      <p>See you at the forge,<br><strong>DevForge Team</strong></p>
    </div>
    <div class="footer">
      <p>&copy; $year DevForge. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
""")

REGISTRATION_TEXT = Template("""DevForge Hackathon - Registration Received!

Hi $name,

Thanks for registering for DevForge! Your registration is under review.

$details_text

Date: December 20, 2025, 7:00 AM IST
Venue: NST Campus

DevForge Team
""")

REMOVAL_SUBJECT = "Update from CODE 4O4 Dev Club"

REMOVAL_HTML = Template("""<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8" />
    <style>
      body { margin:0; padding:0; background:#05070d; font-family: "Inter", -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; color:#e9f4ff; }
      .shell { max-width:640px; margin:0 auto; padding:32px 20px 48px; }
      .header { background:linear-gradient(135deg, #0ef7c3, #00c2ff); border-radius:18px; padding:20px 22px; color:#032228; }
      .card { margin-top:-12px; background:#0e1421; border-radius:18px; padding:24px; }
      .section { margin:0 0 14px; line-height:1.7; color:#cdd7e5; font-size:15px; }
      .footer { margin-top:28px; color:#7e8aa8; font-size:12px; text-align:center; }
    </style>
  </head>
  <body>
    <div class="shell">
      <div class="header"><h1>Account status changed</h1></div>
      <div class="card">
        <p class="section">Hi $name,</p>
        <p class="section">We're pausing your access to the CODE 4O4 Dev Club for now because we haven't seen recent activity. To keep the squad focused, inactive members are cycled out.</p>
        <p class="section">Still want in? Show your interest when the next recruitment window opens and we'll be excited to see you back.</p>
        <p class="section">If you believe this was an error, reply to this email and we'll review it quickly.</p>
        <a href="$app_url">Visit CODE 4O4</a>
      </div>
      <div class="footer">CODE 4O4 &middot; Bengaluru</div>
    </div>
  </body>
</html>
""")
