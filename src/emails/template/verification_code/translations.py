DEFAULT_TRANSLATIONS = {
    "zh": {
        "subject": "【香蕉AI工作室】邮箱验证码",
        "brand": "香蕉AI工作室",
        "greeting": "您好！",
        "intro": "您的验证码是：",
        "expiry": "验证码将在 {minutes} 分钟后失效，请尽快完成注册。",
        "ignore": "如果这不是您的操作，请忽略此邮件。",
        "footer": "© 香蕉AI工作室",
    },
    "en": {
        "subject": "[Banana AI Studio] Your verification code",
        "brand": "Banana AI Studio",
        "greeting": "Hello!",
        "intro": "Your verification code is:",
        "expiry": "This code expires in {minutes} minutes. Please finish registering soon.",
        "ignore": "If you did not request this, you can ignore this email.",
        "footer": "© Banana AI Studio",
    },
}
