"""
E-number additive table: halal status by default and per school.

Codes are stored upper-case without separators ("E150A"). Curated
ingredient rules in naqiy.seeds.rulings take precedence over this table
for the same code.
"""

from __future__ import annotations

# (code, name_fr, name_en, category, origin, ruling_default, explanation_fr)
ADDITIVES: list[tuple[str, str, str, str, str, str, str]] = [
    ("E100", "Curcumine", "Curcumin", "colorant", "plant", "halal", "Colorant naturel extrait du curcuma"),
    ("E101", "Riboflavine", "Riboflavin", "colorant", "synthetic", "halal", "Vitamine B2, synthétique ou végétale"),
    ("E102", "Tartrazine", "Tartrazine", "colorant", "synthetic", "halal", "Colorant synthétique azoïque"),
    ("E104", "Jaune de quinoléine", "Quinoline Yellow", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E110", "Jaune orangé S", "Sunset Yellow FCF", "colorant", "synthetic", "halal", "Colorant synthétique azoïque"),
    ("E120", "Carmine / Cochenille", "Carmine / Cochineal", "colorant", "insect", "haram", "Colorant extrait d'insectes (cochenille), haram par consensus"),
    ("E122", "Azorubine", "Azorubine", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E124", "Ponceau 4R", "Ponceau 4R", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E129", "Rouge allura AC", "Allura Red AC", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E131", "Bleu patenté V", "Patent Blue V", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E132", "Indigotine", "Indigo Carmine", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E133", "Bleu brillant FCF", "Brilliant Blue FCF", "colorant", "synthetic", "halal", "Colorant synthétique"),
    ("E140", "Chlorophylles", "Chlorophylls", "colorant", "plant", "halal", "Pigment végétal naturel"),
    ("E141", "Complexes cuivre-chlorophylles", "Copper Chlorophylls", "colorant", "plant", "halal", "Dérivé végétal"),
    ("E150A", "Caramel", "Plain Caramel", "colorant", "plant", "halal", "Sucre caramélisé"),
    ("E150B", "Caramel de sulfite caustique", "Caustic Sulphite Caramel", "colorant", "plant", "halal", "Caramel traité"),
    ("E150C", "Caramel ammoniacal", "Ammonia Caramel", "colorant", "plant", "halal", "Caramel traité à l'ammoniac"),
    ("E150D", "Caramel de sulfite d'ammonium", "Sulphite Ammonia Caramel", "colorant", "plant", "halal", "Caramel traité"),
    ("E153", "Charbon végétal", "Vegetable Carbon", "colorant", "plant", "halal", "Charbon d'origine végétale"),
    ("E160A", "Bêta-carotène", "Beta-Carotene", "colorant", "plant", "halal", "Pigment végétal (carottes, fruits)"),
    ("E160B", "Annatto / Rocou", "Annatto", "colorant", "plant", "halal", "Colorant végétal"),
    ("E160C", "Extrait de paprika", "Paprika Extract", "colorant", "plant", "halal", "Extrait végétal"),
    ("E161B", "Lutéine", "Lutein", "colorant", "plant", "halal", "Pigment végétal"),
    ("E162", "Rouge de betterave", "Beetroot Red", "colorant", "plant", "halal", "Extrait de betterave"),
    ("E163", "Anthocyanes", "Anthocyanins", "colorant", "plant", "halal", "Pigments végétaux (raisin, baies)"),
    ("E170", "Carbonate de calcium", "Calcium Carbonate", "colorant", "mineral", "halal", "Minéral naturel"),
    ("E171", "Dioxyde de titane", "Titanium Dioxide", "colorant", "mineral", "halal", "Minéral synthétique"),
    ("E172", "Oxydes de fer", "Iron Oxides", "colorant", "mineral", "halal", "Minéral"),
    ("E200", "Acide sorbique", "Sorbic Acid", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E202", "Sorbate de potassium", "Potassium Sorbate", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E210", "Acide benzoïque", "Benzoic Acid", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E211", "Benzoate de sodium", "Sodium Benzoate", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E220", "Dioxyde de soufre", "Sulphur Dioxide", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E221", "Sulfite de sodium", "Sodium Sulphite", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E234", "Nisine", "Nisin", "preservative", "synthetic", "halal", "Antimicrobien naturel"),
    ("E249", "Nitrite de potassium", "Potassium Nitrite", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E250", "Nitrite de sodium", "Sodium Nitrite", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E251", "Nitrate de sodium", "Sodium Nitrate", "preservative", "synthetic", "halal", "Conservateur"),
    ("E252", "Nitrate de potassium", "Potassium Nitrate", "preservative", "synthetic", "halal", "Conservateur"),
    ("E260", "Acide acétique", "Acetic Acid", "preservative", "plant", "halal", "Vinaigre"),
    ("E270", "Acide lactique", "Lactic Acid", "preservative", "plant", "halal", "Fermentation végétale"),
    ("E280", "Acide propionique", "Propionic Acid", "preservative", "synthetic", "halal", "Conservateur synthétique"),
    ("E290", "Dioxyde de carbone", "Carbon Dioxide", "preservative", "mineral", "halal", "Gaz naturel"),
    ("E296", "Acide malique", "Malic Acid", "acid", "plant", "halal", "Acide de fruit (pomme)"),
    ("E297", "Acide fumarique", "Fumaric Acid", "acid", "synthetic", "halal", "Acide organique synthétique"),
    ("E300", "Acide ascorbique", "Ascorbic Acid", "antioxidant", "synthetic", "halal", "Vitamine C"),
    ("E301", "Ascorbate de sodium", "Sodium Ascorbate", "antioxidant", "synthetic", "halal", "Sel de vitamine C"),
    ("E304", "Palmitate d'ascorbyle", "Ascorbyl Palmitate", "antioxidant", "plant", "halal", "Ester de vitamine C"),
    ("E306", "Tocophérols (Vitamine E)", "Tocopherols", "antioxidant", "plant", "halal", "Vitamine E naturelle"),
    ("E310", "Gallate de propyle", "Propyl Gallate", "antioxidant", "synthetic", "halal", "Antioxydant synthétique"),
    ("E320", "BHA (Butylhydroxyanisole)", "BHA", "antioxidant", "synthetic", "halal", "Antioxydant synthétique"),
    ("E321", "BHT (Butylhydroxytoluène)", "BHT", "antioxidant", "synthetic", "halal", "Antioxydant synthétique"),
    ("E322", "Lécithine", "Lecithin", "emulsifier", "plant", "halal", "Généralement d'origine soja ou tournesol"),
    ("E325", "Lactate de sodium", "Sodium Lactate", "antioxidant", "synthetic", "halal", "Sel d'acide lactique"),
    ("E330", "Acide citrique", "Citric Acid", "acid", "plant", "halal", "Acide de fruit, fermentation"),
    ("E331", "Citrate de sodium", "Sodium Citrate", "acid", "plant", "halal", "Dérivé d'acide citrique"),
    ("E332", "Citrate de potassium", "Potassium Citrate", "acid", "plant", "halal", "Dérivé d'acide citrique"),
    ("E334", "Acide tartrique", "Tartaric Acid", "acid", "plant", "halal", "Acide de fruit (raisin)"),
    ("E338", "Acide phosphorique", "Phosphoric Acid", "acid", "synthetic", "halal", "Acidifiant synthétique (sodas)"),
    ("E339", "Phosphates de sodium", "Sodium Phosphates", "stabilizer", "synthetic", "halal", "Sel synthétique"),
    ("E392", "Extrait de romarin", "Rosemary Extract", "antioxidant", "plant", "halal", "Extrait végétal"),
    ("E400", "Acide alginique", "Alginic Acid", "thickener", "plant", "halal", "Algues marines"),
    ("E401", "Alginate de sodium", "Sodium Alginate", "thickener", "plant", "halal", "Algues marines"),
    ("E406", "Agar-agar", "Agar", "thickener", "plant", "halal", "Gélifiant d'algues marines"),
    ("E407", "Carraghénane", "Carrageenan", "thickener", "plant", "halal", "Algues marines"),
    ("E410", "Gomme de caroube", "Locust Bean Gum", "thickener", "plant", "halal", "Graine de caroubier"),
    ("E412", "Gomme guar", "Guar Gum", "thickener", "plant", "halal", "Graine de guar"),
    ("E413", "Gomme tragacanthe", "Tragacanth", "thickener", "plant", "halal", "Résine d'arbre"),
    ("E414", "Gomme arabique", "Gum Arabic", "thickener", "plant", "halal", "Résine d'acacia"),
    ("E415", "Gomme xanthane", "Xanthan Gum", "thickener", "plant", "halal", "Fermentation bactérienne"),
    ("E416", "Gomme karaya", "Karaya Gum", "thickener", "plant", "halal", "Résine d'arbre"),
    ("E417", "Gomme tara", "Tara Gum", "thickener", "plant", "halal", "Graine de tara"),
    ("E418", "Gomme gellane", "Gellan Gum", "thickener", "plant", "halal", "Fermentation bactérienne"),
    ("E420", "Sorbitol", "Sorbitol", "sweetener", "plant", "halal", "Polyol d'origine végétale"),
    ("E421", "Mannitol", "Mannitol", "sweetener", "plant", "halal", "Polyol d'origine végétale"),
    ("E422", "Glycérol", "Glycerol", "humectant", "mixed", "doubtful", "Peut être d'origine animale (graisses) ou végétale, origine inconnue"),
    ("E432", "Polysorbate 20", "Polysorbate 20", "emulsifier", "mixed", "doubtful", "Peut contenir des acides gras d'origine animale"),
    ("E440", "Pectine", "Pectin", "thickener", "plant", "halal", "Extrait de fruits (pomme, agrumes)"),
    ("E441", "Gélatine", "Gelatin", "thickener", "animal", "haram", "Collagène animal, généralement d'origine porcine ou bovine non-zabiha"),
    ("E442", "Phosphatides d'ammonium", "Ammonium Phosphatides", "emulsifier", "plant", "halal", "D'origine végétale (lécithine)"),
    ("E450", "Polyphosphates", "Polyphosphates", "stabilizer", "synthetic", "halal", "Sels synthétiques"),
    ("E460", "Cellulose", "Cellulose", "thickener", "plant", "halal", "Fibre végétale"),
    ("E461", "Méthylcellulose", "Methylcellulose", "thickener", "plant", "halal", "Dérivé cellulose"),
    ("E464", "Hydroxypropylméthylcellulose", "HPMC", "thickener", "plant", "halal", "Dérivé cellulose"),
    ("E466", "Carboxyméthylcellulose", "CMC", "thickener", "plant", "halal", "Dérivé cellulose"),
    ("E471", "Mono/diglycérides d'acides gras", "Mono- and Diglycerides", "emulsifier", "mixed", "doubtful", "Origine animale ou végétale non précisée, le plus contesté des additifs"),
    ("E472A", "Esters acétiques des mono/diglycérides", "Acetic Acid Esters", "emulsifier", "mixed", "doubtful", "Dérivé E471, origine incertaine"),
    ("E472B", "Esters lactiques des mono/diglycérides", "Lactic Acid Esters", "emulsifier", "mixed", "doubtful", "Dérivé E471, origine incertaine"),
    ("E472C", "Esters citriques des mono/diglycérides", "Citric Acid Esters", "emulsifier", "mixed", "doubtful", "Dérivé E471, origine incertaine"),
    ("E472E", "Esters DATEM", "DATEM", "emulsifier", "mixed", "doubtful", "Dérivé E471, origine incertaine"),
    ("E473", "Esters de saccharose", "Sucrose Esters", "emulsifier", "mixed", "doubtful", "Peut contenir acides gras animaux"),
    ("E474", "Sucroglycérides", "Sucroglycerides", "emulsifier", "mixed", "doubtful", "Peut contenir acides gras animaux"),
    ("E475", "Esters polyglycérol", "Polyglycerol Esters", "emulsifier", "mixed", "doubtful", "Peut contenir acides gras animaux"),
    ("E476", "Polyricinoléate de polyglycérol", "PGPR", "emulsifier", "plant", "halal", "Huile de ricin, végétal"),
    ("E481", "Stéaroyl-2-lactylate de sodium", "Sodium Stearoyl Lactylate", "emulsifier", "mixed", "doubtful", "Acide stéarique, origine animale ou végétale variable"),
    ("E482", "Stéaroyl-2-lactylate de calcium", "Calcium Stearoyl Lactylate", "emulsifier", "mixed", "doubtful", "Acide stéarique, origine variable"),
    ("E491", "Monostéarate de sorbitan", "Sorbitan Monostearate", "emulsifier", "mixed", "doubtful", "Acide stéarique, origine variable"),
    ("E492", "Tristéarate de sorbitan", "Sorbitan Tristearate", "emulsifier", "mixed", "doubtful", "Acide stéarique, origine variable"),
    ("E500", "Bicarbonate de sodium", "Sodium Bicarbonate", "raising_agent", "mineral", "halal", "Minéral"),
    ("E501", "Carbonate de potassium", "Potassium Carbonate", "raising_agent", "mineral", "halal", "Minéral"),
    ("E503", "Carbonate d'ammonium", "Ammonium Carbonate", "raising_agent", "mineral", "halal", "Minéral"),
    ("E504", "Carbonate de magnésium", "Magnesium Carbonate", "anti_caking", "mineral", "halal", "Minéral"),
    ("E507", "Acide chlorhydrique", "Hydrochloric Acid", "acid", "synthetic", "halal", "Acide synthétique"),
    ("E508", "Chlorure de potassium", "Potassium Chloride", "stabilizer", "mineral", "halal", "Sel minéral"),
    ("E509", "Chlorure de calcium", "Calcium Chloride", "stabilizer", "mineral", "halal", "Sel minéral"),
    ("E516", "Sulfate de calcium", "Calcium Sulphate", "stabilizer", "mineral", "halal", "Gypse minéral"),
    ("E524", "Hydroxyde de sodium", "Sodium Hydroxide", "acid", "mineral", "halal", "Minéral"),
    ("E542", "Phosphate d'os", "Bone Phosphate", "anti_caking", "animal", "haram", "Extrait d'os d'animaux, haram si d'animal non-zabiha ou de porc"),
    ("E551", "Dioxyde de silicium", "Silicon Dioxide", "anti_caking", "mineral", "halal", "Minéral"),
    ("E553", "Talc", "Talc", "anti_caking", "mineral", "halal", "Minéral"),
    ("E570", "Acide stéarique", "Stearic Acid", "glazing_agent", "mixed", "doubtful", "Peut être d'origine animale ou végétale"),
    ("E574", "Acide gluconique", "Gluconic Acid", "acid", "plant", "halal", "Fermentation"),
    ("E575", "Glucono-delta-lactone", "GDL", "acid", "plant", "halal", "Fermentation"),
    ("E620", "Acide glutamique", "Glutamic Acid", "flavor_enhancer", "synthetic", "halal", "Acide aminé, fermentation"),
    ("E621", "Glutamate monosodique (MSG)", "Monosodium Glutamate", "flavor_enhancer", "synthetic", "halal", "Fermentation bactérienne"),
    ("E622", "Glutamate monopotassique", "Monopotassium Glutamate", "flavor_enhancer", "synthetic", "halal", "Sel de glutamate"),
    ("E627", "Guanylate disodique", "Disodium Guanylate", "flavor_enhancer", "synthetic", "halal", "Synthétique"),
    ("E631", "Inosinate disodique", "Disodium Inosinate", "flavor_enhancer", "mixed", "doubtful", "Peut être d'origine animale (poisson, viande)"),
    ("E635", "Ribonucléotides disodiques", "Disodium Ribonucleotides", "flavor_enhancer", "mixed", "doubtful", "Mélange E627+E631, peut être d'origine animale"),
    ("E640", "Glycine", "Glycine", "flavor_enhancer", "mixed", "doubtful", "Acide aminé, peut être d'origine animale"),
    ("E900", "Diméthylpolysiloxane", "Dimethylpolysiloxane", "glazing_agent", "synthetic", "halal", "Synthétique (anti-mousse)"),
    ("E901", "Cire d'abeille", "Beeswax", "glazing_agent", "animal", "halal", "Produit d'abeille, halal par consensus (comme le miel)"),
    ("E903", "Cire de carnauba", "Carnauba Wax", "glazing_agent", "plant", "halal", "Cire végétale (palmier)"),
    ("E904", "Shellac / Gomme-laque", "Shellac", "glazing_agent", "insect", "doubtful", "Résine sécrétée par l'insecte lac, débat entre savants"),
    ("E920", "L-Cystéine", "L-Cysteine", "other", "mixed", "doubtful", "Peut être extraite de plumes de volaille ou de cheveux humains"),
    ("E927B", "Carbamide (Urée)", "Carbamide", "other", "synthetic", "halal", "Synthétique"),
    ("E938", "Argon", "Argon", "other", "mineral", "halal", "Gaz noble"),
    ("E941", "Azote", "Nitrogen", "other", "mineral", "halal", "Gaz naturel"),
    ("E948", "Oxygène", "Oxygen", "other", "mineral", "halal", "Gaz naturel"),
    ("E950", "Acésulfame-K", "Acesulfame K", "sweetener", "synthetic", "halal", "Édulcorant synthétique"),
    ("E951", "Aspartame", "Aspartame", "sweetener", "synthetic", "halal", "Édulcorant synthétique"),
    ("E952", "Cyclamate", "Cyclamate", "sweetener", "synthetic", "halal", "Édulcorant synthétique"),
    ("E953", "Isomalt", "Isomalt", "sweetener", "plant", "halal", "Dérivé de betterave"),
    ("E954", "Saccharine", "Saccharin", "sweetener", "synthetic", "halal", "Édulcorant synthétique"),
    ("E955", "Sucralose", "Sucralose", "sweetener", "synthetic", "halal", "Dérivé de sucre"),
    ("E960", "Stéviol glycosides (Stévia)", "Steviol Glycosides", "sweetener", "plant", "halal", "Extrait de plante stevia"),
    ("E965", "Maltitol", "Maltitol", "sweetener", "plant", "halal", "Polyol d'origine végétale"),
    ("E966", "Lactitol", "Lactitol", "sweetener", "plant", "halal", "Dérivé du lactose"),
    ("E967", "Xylitol", "Xylitol", "sweetener", "plant", "halal", "Polyol d'origine végétale (bouleau)"),
    ("E968", "Erythritol", "Erythritol", "sweetener", "plant", "halal", "Polyol fermentation"),
]

# (code, school, ruling, explanation_fr, scholarly_reference)
MADHAB_RULINGS: list[tuple[str, str, str, str, str]] = [
    ("E441", "hanafi", "doubtful", "Débat sur l'istihalah (transformation chimique). Certains grands savants hanafis acceptent que la transformation rend la gélatine pure, mais la majorité des muftis contemporains considèrent la transformation insuffisante.", "SeekersGuidance, Darul Ifta Azaadville"),
    ("E441", "shafii", "haram", "L'école shafi'ite n'accepte pas l'istihalah pour les substances najis. La gélatine d'animal non-zabiha ou porcine reste impure.", "IslamQA, Utrujj Foundation"),
    ("E441", "maliki", "doubtful", "Certains savants malikites et conférences islamiques modernes ont accepté l'istihalah même pour la gélatine porcine. Position non unanime.", "Virtual Mosque, IIFA"),
    ("E441", "hanbali", "haram", "Le fiqh hanbalite classique considère les produits d'animaux non-abattus comme impurs. Pas d'exception via l'istihalah.", "IslamQA.info"),
    ("E471", "hanafi", "doubtful", "Si d'origine végétale : halal. Si d'origine animale non-zabiha : douteux. Vérifier l'étiquetage ou le statut vegan.", "SeekersGuidance"),
    ("E471", "shafii", "doubtful", "Douteux si origine inconnue. Halal si confirmé végétal. Haram si d'animal non-zabiha.", "IslamQA"),
    ("E471", "maliki", "doubtful", "Origine inconnue = douteux. La plupart des savants malikites recommandent la prudence.", "IIFA"),
    ("E471", "hanbali", "doubtful", "Position identique aux autres écoles : douteux si origine non confirmée.", "IslamQA.info"),
    ("E120", "hanafi", "haram", "Extrait d'insectes (cochenille). Les insectes ne sont pas halal dans le fiqh hanafite.", "SeekersGuidance"),
    ("E120", "shafii", "haram", "Insectes impurs, haram par consensus shafi'ite.", "IslamQA"),
    ("E120", "maliki", "haram", "Haram, les insectes ne sont pas licites à la consommation.", "IIFA"),
    ("E120", "hanbali", "haram", "Haram, consensus des quatre écoles sur les insectes.", "IslamQA.info"),
    ("E542", "hanafi", "haram", "Phosphate extrait d'os d'animaux, haram si d'animal non-zabiha ou de porc.", "Darul Ifta"),
    ("E542", "shafii", "haram", "Os d'animal non-zabiha = najis. Haram.", "IslamQA"),
    ("E542", "maliki", "haram", "Haram, même raisonnement.", "IIFA"),
    ("E542", "hanbali", "haram", "Haram, consensus.", "IslamQA.info"),
    ("E904", "hanafi", "doubtful", "Résine sécrétée par l'insecte lac. Certains hanafis la comparent au miel (produit d'insecte acceptable). Non consensuel.", "SeekersGuidance"),
    ("E904", "shafii", "doubtful", "Position prudente, produit d'insecte, mais certains la comparent au miel.", "IslamQA"),
    ("E920", "hanafi", "doubtful", "Peut être extraite de plumes de volaille (halal si zabiha) ou de cheveux humains (haram). Origine à vérifier.", "SeekersGuidance"),
    ("E920", "shafii", "doubtful", "Même position, si cheveux humains : haram.", "IslamQA"),
    ("E422", "hanafi", "doubtful", "Le glycérol peut être d'origine animale ou végétale. Douteux si non précisé.", "SeekersGuidance"),
    ("E422", "shafii", "doubtful", "Même raisonnement, origine inconnue = douteux.", "IslamQA"),
]
