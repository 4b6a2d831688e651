"""
Myanmar post template engine behind the generate-content function.

Fills canned phrase patterns keyed by platform with the fields of the brief.
Quality and engagement scores are simulated, so two calls with the same brief
return the same text but different scores.
"""
import random
import re
import time
from typing import List, Callable, Dict
from studio.schemas.content import GenerationRequest, GeneratedVariant
from studio.core.token_rules import MAX_KEYWORDS

VARIANT_COUNT = 3


def _self_ref(brand_gender: str) -> str:
    """First-person pronoun: ကျွန်မ for female brands, ကျွန်တော် otherwise."""
    return "ကျွန်မ" if brand_gender == "female" else "ကျွန်တော်"


def _hashtag(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _facebook_offer(r: GenerationRequest) -> str:
    return (
        f"🌟 {r.businessName} မှ {r.productService} အတွက် အထူးကမ်းလှမ်းချက်! \n\n"
        f"{r.targetAudience} အတွက် အထူးရည်ရွယ်ထားသော {_self_ref(r.brandGender)}တို့၏ ဝန်ဆောင်မှုများကို "
        f"မြန်မာ့ယဉ်ကျေးမှုနှင့် ကိုက်ညီအောင် ပြင်ဆင်ထားပါသည်။\n\n"
        f"📞 ဆက်သွယ်စုံစမ်းရန် - [ဖုန်းနံပါတ်]\n"
        f"📍 လိပ်စာ - [လိပ်စာ]\n\n"
        f"#{_hashtag(r.businessName)} #Myanmar #{r.platform} #QualityService #မြန်မာ"
    )


def _facebook_pride(r: GenerationRequest) -> str:
    me = _self_ref(r.brandGender)
    return (
        f"✨ {r.businessName} ဂုဏ်ယူစွာတင်ပြပါသည်! \n\n"
        f"{me}တို့၏ {r.productService} သည် {r.targetAudience} များအတွက် အထူးဖန်တီးထားပါသည်။ \n\n"
        f"မြန်မာ့အရသာနှင့် နိုင်ငံတကာ အရည်အသွေးကို ပေါင်းစပ်ထားသော {me}တို့၏ ထုတ်ကုန်များကို စမ်းသပ်ကြည့်ပါ။\n\n"
        f"🎯 လာရောက်ဝယ်ယူရန် ဖိတ်ကြားပါသည်!\n\n"
        f"#MyanmarBusiness #Quality #{r.platform}Content #ကိုယ်ပိုင်လုပ်ငန်း"
    )


def _facebook_deal(r: GenerationRequest) -> str:
    return (
        f"🔥 {r.businessName} Hot Deal! \n\n"
        f"{r.targetAudience} တွေအတွက် အထူးလျှော့စျေး! {_self_ref(r.brandGender)}တို့ရဲ့ {r.productService} ကို "
        f"အခုပဲ အာဒါမှာလိုက်ပါ။\n\n"
        f"💰 အထူးစျေးနှုန်း\n"
        f"⏰ ကန့်သတ်ချိန်အတွင်းသာ\n"
        f"🎁 အခမဲ့ဒေလီဗရီ\n\n"
        f"ခု order လုပ်လိုက်ပါ!\n\n"
        f"#{r.businessName} #SpecialOffer #Myanmar #OrderNow"
    )


def _instagram_short(r: GenerationRequest) -> str:
    return (
        f"{r.businessName} 💫\n\n"
        f"{r.productService} for {r.targetAudience} \n\n"
        f"#{_hashtag(r.businessName)} #Myanmar #Insta #Quality #Local"
    )


def _instagram_premium(r: GenerationRequest) -> str:
    return (
        f"✨ Premium {r.productService} ✨\n\n"
        f"Perfect for {r.targetAudience}\n"
        f"📍 Myanmar\n"
        f"🔥 Order now!\n\n"
        f"#MyanmarBusiness #Premium #Instagram #{r.platform}"
    )


# Platforms without their own table (tiktok, telegram) use facebook's
TEMPLATES: Dict[str, List[Callable[[GenerationRequest], str]]] = {
    "facebook": [_facebook_offer, _facebook_pride, _facebook_deal],
    "instagram": [_instagram_short, _instagram_premium],
}


def extract_keywords(request: GenerationRequest) -> List[str]:
    keywords = [_hashtag(request.businessName), "Myanmar", request.platform]

    if request.contentType == "promotion":
        keywords.extend(["SpecialOffer", "Promotion", "Deal"])
    elif request.contentType == "announcement":
        keywords.extend(["News", "Update", "Announcement"])

    if request.tone == "professional":
        keywords.extend(["Professional", "Quality"])
    elif request.tone == "friendly":
        keywords.extend(["Friendly", "Welcome"])

    return keywords[:MAX_KEYWORDS]


def generate_variants(request: GenerationRequest, rng: random.Random = None) -> List[GeneratedVariant]:
    rng = rng or random.Random()
    templates = TEMPLATES.get(request.platform, TEMPLATES["facebook"])
    keywords = extract_keywords(request)
    stamp = int(time.time() * 1000)

    variants = []
    for variation in range(1, VARIANT_COUNT + 1):
        template = templates[variation % len(templates)]
        variants.append(GeneratedVariant(
            id=f"content_{variation}_{stamp}",
            content=template(request),
            quality_score=rng.randint(80, 99),
            engagement_prediction=rng.randint(60, 89),
            keywords=list(keywords),
        ))
    return variants
